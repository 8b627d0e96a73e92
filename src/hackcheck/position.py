"""Parsing of user-supplied location strings.

Three grammars are accepted, depending on the command:

* ``"<line>:<char>"`` when the source text arrives separately on stdin;
* ``"<path>:<line>:<char>"`` when the position names a file;
* ``"<owner>::<member>"`` (or a bare function name) for ``find-refs``.

Parsing is strict. A malformed string raises ``InputError`` carrying the
diagnostic to print; nothing is defaulted.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
from typing import Callable

from hackcheck.exceptions import InputError
from hackcheck.exit_status import PathNotFound
from hackcheck.schema import (
    ClassRename,
    FileContent,
    FileName,
    FunctionRef,
    FunctionRename,
    MethodRef,
    MethodRename,
)

STDIN_SOURCE = "-"

_INVALID_POSITION = "Invalid position"
_INVALID_INPUT = "Invalid input"
_DIGITS_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Position:
    line: int
    column: int


def _parse_int(token: str) -> int:
    if not _DIGITS_RE.fullmatch(token):
        raise InputError(_INVALID_POSITION)
    return int(token)


def _position_from_tokens(line_token: str, column_token: str) -> Position:
    line = _parse_int(line_token)
    column = _parse_int(column_token)
    if line < 1:
        raise InputError(_INVALID_POSITION)
    return Position(line=line, column=column)


def parse_position(text: str) -> Position:
    pieces = text.split(":")
    if len(pieces) != 2:
        raise InputError(_INVALID_POSITION)
    return _position_from_tokens(pieces[0], pieces[1])


def resolve_path(path: str, *, cwd: Path | None = None) -> str | PathNotFound:
    """Return the path as given if it exists, else joined onto ``cwd``."""
    raw = Path(path)
    if raw.exists():
        return str(raw)
    joined = (cwd if cwd is not None else Path.cwd()) / path
    if joined.exists():
        return str(joined)
    return PathNotFound(path=path)


def parse_file_position(
    text: str,
    *,
    cwd: Path | None = None,
    read_source: Callable[[str], str],
) -> tuple[FileName | FileContent, Position] | PathNotFound:
    """Parse ``path:line:char`` or ``line:char``.

    The two-segment form takes its source text from stdin. Positions are
    validated before the path is resolved or stdin is read.
    """
    pieces = text.split(":")
    if len(pieces) == 3:
        filename, line_token, column_token = pieces
        position = _position_from_tokens(line_token, column_token)
        resolved = resolve_path(filename, cwd=cwd)
        if isinstance(resolved, PathNotFound):
            return resolved
        return FileName(path=resolved), position
    if len(pieces) == 2:
        position = _position_from_tokens(pieces[0], pieces[1])
        return FileContent(content=read_source(STDIN_SOURCE)), position
    raise InputError(_INVALID_POSITION)


def _compound_pieces(text: str) -> list[str]:
    pieces = text.split("::")
    while pieces and not pieces[0]:
        pieces.pop(0)
    while pieces and not pieces[-1]:
        pieces.pop()
    return pieces


def parse_compound_ref(text: str) -> FunctionRef | MethodRef:
    pieces = _compound_pieces(text)
    if not pieces:
        raise InputError(_INVALID_INPUT)
    if len(pieces) == 1:
        return FunctionRef(name=pieces[0])
    owner, member = pieces[0], pieces[1]
    if not owner or not member:
        raise InputError(_INVALID_INPUT)
    return MethodRef(class_name=owner, method_name=member)


def _split_method(text: str, *, side: str) -> tuple[str, str]:
    pieces = text.split("::")
    if len(pieces) != 2 or not pieces[0] or not pieces[1]:
        raise InputError(f"{side} string should be of the format class::method")
    return pieces[0], pieces[1]


def parse_refactor_action(
    kind: str, before: str, after: str
) -> ClassRename | FunctionRename | MethodRename:
    if not before or not after:
        raise InputError(_INVALID_INPUT)
    if kind == "Class":
        return ClassRename(before=before, after=after)
    if kind == "Function":
        return FunctionRename(before=before, after=after)
    if kind == "Method":
        before_class, before_method = _split_method(before, side="Before")
        after_class, after_method = _split_method(after, side="After")
        if before_class != after_class:
            raise InputError("Before and After classname must match")
        return MethodRename(
            class_name=before_class, before=before_method, after=after_method
        )
    raise InputError(f"Undefined refactor mode: {kind}")
