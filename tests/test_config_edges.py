from __future__ import annotations

from pathlib import Path
import tempfile

import pytest

from hackcheck import config


def test_load_toml_missing_and_invalid(tmp_path: Path) -> None:
    missing = tmp_path / "missing.toml"
    assert config._load_toml(missing) == {}

    invalid = tmp_path / "invalid.toml"
    invalid.write_text("not = [toml", encoding="utf-8")
    assert config._load_toml(invalid) == {}

    assert config._load_toml(tmp_path) == {}


def test_load_config_default_path(tmp_path: Path) -> None:
    cfg = tmp_path / config.DEFAULT_CONFIG_NAME
    cfg.write_text("[client]\nfrom = 'vim'\n", encoding="utf-8")
    data = config.load_config(root=tmp_path, config_path=None)
    assert data["client"]["from"] == "vim"


def test_client_defaults_ignores_non_table(tmp_path: Path) -> None:
    cfg = tmp_path / "custom.toml"
    cfg.write_text("client = 'nope'\n", encoding="utf-8")
    assert config.client_defaults(root=tmp_path, config_path=cfg) == {}
    assert config.client_defaults(root=tmp_path / "absent") == {}


def test_config_helpers_cover_bool_and_text() -> None:
    assert config._as_bool(True) is True
    assert config._as_bool(0) is False
    assert config._as_bool(2) is True
    assert config._as_bool("yes") is True
    assert config._as_bool("nope") is False
    assert config._as_bool(None) is False
    assert config._as_text("  a  ") == "a"
    assert config._as_text("   ") is None
    assert config._as_text(3) is None


def test_default_socket_path_is_stable_per_root(tmp_path: Path) -> None:
    first = config.default_socket_path(tmp_path)
    assert first == config.default_socket_path(tmp_path)
    assert first != config.default_socket_path(tmp_path / "other")
    assert first.parent == Path(tempfile.gettempdir())
    assert first.name.startswith("hackcheck-")


def test_resolve_socket_path_precedence(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    section = {"socket": "run/hh.sock"}
    flag = tmp_path / "flag.sock"
    assert config.resolve_socket_path(root=tmp_path, option=flag, section=section) == flag

    monkeypatch.setenv(config.SOCKET_ENV, "/tmp/env.sock")
    assert config.resolve_socket_path(
        root=tmp_path, option=None, section=section
    ) == Path("/tmp/env.sock")

    monkeypatch.delenv(config.SOCKET_ENV)
    assert (
        config.resolve_socket_path(root=tmp_path, option=None, section=section)
        == tmp_path / "run" / "hh.sock"
    )
    assert config.resolve_socket_path(
        root=tmp_path, option=None, section={"socket": "/abs/hh.sock"}
    ) == Path("/abs/hh.sock")
    assert config.resolve_socket_path(
        root=tmp_path, option=None, section={}
    ) == config.default_socket_path(tmp_path)


def test_resolve_from_and_json() -> None:
    assert config.resolve_from(None, {}) == ""
    assert config.resolve_from(None, {"from": "emacs"}) == "emacs"
    assert config.resolve_from("vim", {"from": "emacs"}) == "vim"
    assert config.resolve_output_json(False, {}) is False
    assert config.resolve_output_json(False, {"json": True}) is True
    assert config.resolve_output_json(True, {"json": False}) is True
