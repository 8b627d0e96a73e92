from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from tests.channel_helpers import FakeChannel, RecordingSink


@pytest.fixture(autouse=True)
def _no_socket_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("HACKCHECK_SOCKET", raising=False)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_channel():
    def _make(*, lines: list[str] | None = None, result: object = None) -> FakeChannel:
        return FakeChannel(lines=lines or [], result=result)

    return _make


@pytest.fixture
def stdin_reader():
    reads: list[str] = []

    def _factory(content: str = ""):
        def _read(source: str) -> str:
            reads.append(source)
            return content

        _read.reads = reads  # type: ignore[attr-defined]
        return _read

    return _factory
