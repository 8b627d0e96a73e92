"""Invariant markers for the hackcheck client."""

from __future__ import annotations

from typing import NoReturn

from hackcheck.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The optional env payload is attached to the raised exception for
    diagnostics; it is not evaluated otherwise.
    """
    raise NeverThrown(reason or "never() marker reached", env=env)
