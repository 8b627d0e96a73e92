from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from hackcheck.channel import ChannelError
from hackcheck.exit_status import ExitStatus, PathNotFound


@runtime_checkable
class InvocationObserver(Protocol):
    """Receives the start and the outcome of every dispatched command.

    A fatal channel failure is reported as the ``ChannelError`` itself.
    """

    def client_check(self, mode_name: str, from_: str) -> None: ...

    def client_check_finish(
        self, mode_name: str, outcome: ExitStatus | PathNotFound | ChannelError
    ) -> None: ...


class NullObserver:
    def client_check(self, mode_name: str, from_: str) -> None:
        return None

    def client_check_finish(
        self, mode_name: str, outcome: ExitStatus | PathNotFound | ChannelError
    ) -> None:
        return None


@dataclass
class RecordingObserver:
    events: list[tuple[str, str, object]] = field(default_factory=list)

    def client_check(self, mode_name: str, from_: str) -> None:
        self.events.append(("start", mode_name, from_))

    def client_check_finish(
        self, mode_name: str, outcome: ExitStatus | PathNotFound | ChannelError
    ) -> None:
        self.events.append(("finish", mode_name, outcome))


NULL_OBSERVER = NullObserver()
