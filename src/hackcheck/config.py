from __future__ import annotations

from datetime import date, datetime, time
import hashlib
import os
from pathlib import Path
import tempfile
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "hackcheck.toml"
SOCKET_ENV = "HACKCHECK_SOCKET"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def client_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("client", {})
    return section if isinstance(section, dict) else {}


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _as_text(value: TomlValue) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def default_socket_path(root: Path) -> Path:
    digest = hashlib.md5(str(root.resolve()).encode("utf-8")).hexdigest()[:12]
    return Path(tempfile.gettempdir()) / f"hackcheck-{digest}.sock"


def resolve_socket_path(
    *,
    root: Path,
    option: Path | None,
    section: TomlTable,
) -> Path:
    """Pick the server socket: CLI flag, then environment, then config, then default."""
    if option is not None:
        return option
    env_value = os.getenv(SOCKET_ENV, "").strip()
    if env_value:
        return Path(env_value)
    configured = _as_text(section.get("socket"))
    if configured is not None:
        path = Path(configured)
        return path if path.is_absolute() else root / path
    return default_socket_path(root)


def resolve_from(option: str | None, section: TomlTable) -> str:
    if option is not None:
        return option
    return _as_text(section.get("from")) or ""


def resolve_output_json(option: bool, section: TomlTable) -> bool:
    return option or _as_bool(section.get("json"))
