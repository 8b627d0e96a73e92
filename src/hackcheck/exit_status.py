from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Sequence

from hackcheck import modes

if TYPE_CHECKING:
    from hackcheck.schema import StatusErrorDTO


class ExitStatus(IntEnum):
    """Outcome of one command; the value is the process exit code."""

    OK = 0
    TYPE_ERROR = 2
    CHECKPOINT_ERROR = 8
    INPUT_ERROR = 10


PATH_NOT_FOUND_EXIT_CODE = 3
CHANNEL_ERROR_EXIT_CODE = 1


@dataclass(frozen=True)
class PathNotFound:
    """Neither the raw path nor its cwd-relative form exists.

    Returned instead of an ExitStatus; the top-level caller decides to
    terminate.
    """

    path: str

    @property
    def exit_code(self) -> int:
        return PATH_NOT_FOUND_EXIT_CODE


def status_for_errors(errors: Sequence[StatusErrorDTO]) -> ExitStatus:
    return ExitStatus.OK if not errors else ExitStatus.TYPE_ERROR


def status_for_checkpoint(result: object) -> ExitStatus:
    if result is None or result is False:
        return ExitStatus.CHECKPOINT_ERROR
    return ExitStatus.OK


def resolve_exit_status(mode: modes.Mode, result: object) -> ExitStatus:
    match mode:
        case modes.Status():
            return status_for_errors(result)  # type: ignore[arg-type]
        case modes.RetrieveCheckpoint() | modes.DeleteCheckpoint():
            return status_for_checkpoint(result)
        case _:
            return ExitStatus.OK


def exit_code_for(outcome: ExitStatus | PathNotFound) -> int:
    if isinstance(outcome, PathNotFound):
        return outcome.exit_code
    return int(outcome)
