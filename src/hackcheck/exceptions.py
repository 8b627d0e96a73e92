"""Exception protocol for the hackcheck client."""

from __future__ import annotations


class NeverRaise(RuntimeError):
    """Sentinel exception that should be statically unreachable.

    Raising this exception signals a broken client invariant, for example a
    command mode that the dispatcher has no branch for. It is never part of
    the normal outcome of a command.
    """

    def __init__(self, message: str, *, env: dict[str, object] | None = None):
        super().__init__(message)
        self.reason = message
        self.env = dict(env or {})


class NeverThrown(NeverRaise):
    """Alias for NeverRaise used by the explicit never() marker."""


class InputError(ValueError):
    """A location string or compound reference could not be parsed.

    The message is the one-line diagnostic shown to the user.
    """
