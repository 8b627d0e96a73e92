from __future__ import annotations

import io

import pytest

from hackcheck.channel import Channel, ChannelError, _read_frame
from hackcheck.schema import (
    FileContent,
    InferTypeRequest,
    ListFilesRequest,
    ShowRequest,
    StatusRequest,
)
from tests.channel_helpers import decode_frames, rpc_frame


def _channel(inbound: bytes) -> tuple[Channel, io.BytesIO]:
    outbound = io.BytesIO()
    return Channel(io.BytesIO(inbound), outbound), outbound


def test_stream_yields_lines_in_received_order() -> None:
    channel, outbound = _channel(b"a\nb\nc\n")
    lines = list(channel.stream(ListFilesRequest()))
    assert lines == ["a", "b", "c"]
    assert not channel.busy
    (sent,) = decode_frames(outbound.getvalue())
    assert sent["method"] == "LIST_FILES"
    assert sent["params"] == {}


def test_stream_writes_request_before_iteration() -> None:
    channel, outbound = _channel(b"")
    lines = channel.stream(ShowRequest(name="Foo"))
    (sent,) = decode_frames(outbound.getvalue())
    assert sent["method"] == "SHOW"
    assert sent["params"] == {"name": "Foo"}
    assert channel.busy
    assert list(lines) == []
    assert not channel.busy


def test_stream_keeps_empty_lines() -> None:
    channel, _ = _channel(b"first\n\nlast\n")
    assert list(channel.stream(ShowRequest(name="Foo"))) == ["first", "", "last"]


def test_stream_partial_last_line_is_truncation() -> None:
    channel, _ = _channel(b"a\nb")
    lines = channel.stream(ListFilesRequest())
    assert next(lines) == "a"
    with pytest.raises(ChannelError) as exc:
        next(lines)
    assert "truncated" in str(exc.value)


def test_request_while_stream_is_undrained_is_refused() -> None:
    channel, _ = _channel(b"a\nb\n")
    lines = channel.stream(ListFilesRequest())
    assert next(lines) == "a"
    with pytest.raises(ChannelError) as exc:
        channel.rpc(StatusRequest())
    assert "in flight" in str(exc.value)
    assert list(lines) == ["b"]


def test_rpc_returns_single_result_and_skips_notifications() -> None:
    inbound = rpc_frame({"jsonrpc": "2.0", "method": "progress", "params": {}}) + rpc_frame(
        {"jsonrpc": "2.0", "id": 1, "result": [{"messages": []}]}
    )
    channel, outbound = _channel(inbound)
    assert channel.rpc(StatusRequest()) == [{"messages": []}]
    assert not channel.busy
    (sent,) = decode_frames(outbound.getvalue())
    assert sent == {"jsonrpc": "2.0", "id": 1, "method": "STATUS", "params": {}}


def test_sequential_rpcs_use_fresh_ids() -> None:
    inbound = rpc_frame({"id": 1, "result": True}) + rpc_frame({"id": 2, "result": None})
    channel, outbound = _channel(inbound)
    assert channel.rpc(StatusRequest()) is True
    assert channel.rpc(StatusRequest()) is None
    assert [message["id"] for message in decode_frames(outbound.getvalue())] == [1, 2]


def test_rpc_serializes_file_input_variant() -> None:
    channel, outbound = _channel(rpc_frame({"id": 1, "result": [[3, 4], "int"]}))
    request = InferTypeRequest(file_input=FileContent(content="<?hh"), line=3, char=4)
    assert channel.rpc(request) == [[3, 4], "int"]
    (sent,) = decode_frames(outbound.getvalue())
    assert sent["params"] == {
        "file_input": {"kind": "content", "content": "<?hh"},
        "line": 3,
        "char": 4,
    }


def test_rpc_server_error_raises() -> None:
    channel, _ = _channel(rpc_frame({"id": 1, "error": {"message": "boom"}}))
    with pytest.raises(ChannelError) as exc:
        channel.rpc(StatusRequest())
    assert "boom" in str(exc.value)
    assert not channel.busy


def test_rpc_closed_channel_raises() -> None:
    channel, _ = _channel(b"")
    with pytest.raises(ChannelError) as exc:
        channel.rpc(StatusRequest())
    assert "closed" in str(exc.value)


def test_rpc_truncated_body_raises() -> None:
    frame = rpc_frame({"id": 1, "result": "abcdef"})
    channel, _ = _channel(frame[:-3])
    with pytest.raises(ChannelError):
        channel.rpc(StatusRequest())


def test_read_frame_rejects_missing_length() -> None:
    with pytest.raises(ChannelError) as exc:
        _read_frame(io.BytesIO(b"Foo: bar\r\n\r\n{}"))
    assert "Content-Length" in str(exc.value)


def test_read_frame_rejects_non_object_payload() -> None:
    with pytest.raises(ChannelError):
        _read_frame(io.BytesIO(rpc_frame([])))  # type: ignore[arg-type]


def test_channel_closes_its_streams() -> None:
    inbound, outbound = io.BytesIO(), io.BytesIO()
    with Channel(inbound, outbound):
        pass
    assert inbound.closed
    assert outbound.closed


class _ResetStream(io.BytesIO):
    def read(self, *_args: object) -> bytes:
        raise ConnectionResetError(104, "Connection reset by peer")

    def readline(self, *_args: object) -> bytes:
        raise ConnectionResetError(104, "Connection reset by peer")


class _BrokenWriter(io.BytesIO):
    def write(self, *_args: object) -> int:
        raise BrokenPipeError(32, "Broken pipe")


def test_rpc_peer_reset_is_channel_error() -> None:
    channel = Channel(_ResetStream(), io.BytesIO())
    with pytest.raises(ChannelError) as exc:
        channel.rpc(StatusRequest())
    assert isinstance(exc.value.__cause__, ConnectionResetError)
    assert not channel.busy


def test_stream_peer_reset_is_channel_error() -> None:
    channel = Channel(_ResetStream(), io.BytesIO())
    with pytest.raises(ChannelError):
        list(channel.stream(ListFilesRequest()))
    assert not channel.busy


def test_failed_write_leaves_channel_idle() -> None:
    channel = Channel(io.BytesIO(rpc_frame({"id": 2, "result": True})), _BrokenWriter())
    with pytest.raises(ChannelError):
        channel.rpc(StatusRequest())
    assert not channel.busy
    with pytest.raises(ChannelError) as exc:
        channel.rpc(StatusRequest())
    assert "in flight" not in str(exc.value)


def test_stream_keeps_undecodable_bytes() -> None:
    channel, _ = _channel(b"caf\xe9.php\n")
    (line,) = list(channel.stream(ListFilesRequest()))
    assert line.encode("utf-8", errors="surrogateescape") == b"caf\xe9.php"
