from __future__ import annotations

import json
from pathlib import Path
import socket
from typing import BinaryIO, Callable, Iterator

from hackcheck.json_types import JSONObject, JSONValue
from hackcheck.schema import WireRequest


class ChannelError(RuntimeError):
    pass


def _read(read: Callable[..., bytes], *args: int) -> bytes:
    try:
        return read(*args)
    except (OSError, ValueError) as exc:
        raise ChannelError(f"channel closed: {exc}") from exc


def _read_exact(stream: BinaryIO, length: int) -> bytes:
    body = bytearray()
    while len(body) < length:
        chunk = _read(stream.read, length - len(body))
        if not chunk:
            raise ChannelError("channel closed mid-response")
        body.extend(chunk)
    return bytes(body)


def _read_frame(stream: BinaryIO) -> JSONObject:
    header = b""
    while b"\r\n\r\n" not in header:
        chunk = _read(stream.read, 1)
        if not chunk:
            raise ChannelError("channel closed")
        header += chunk
    head, _, rest = header.partition(b"\r\n\r\n")
    length = 0
    for line in head.split(b"\r\n"):
        if line.lower().startswith(b"content-length:"):
            try:
                length = int(line.split(b":", 1)[1].strip())
            except ValueError:
                length = 0
            break
    if length <= 0:
        raise ChannelError("invalid Content-Length")
    body = rest
    if len(body) < length:
        body += _read_exact(stream, length - len(body))
    elif len(body) > length:
        body = body[:length]
    try:
        message = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ChannelError(f"malformed response frame: {exc}") from exc
    if not isinstance(message, dict):
        raise ChannelError("invalid response payload")
    return message


def _write_frame(stream: BinaryIO, message: JSONObject) -> None:
    payload = json.dumps(message).encode("utf-8")
    header = f"Content-Length: {len(payload)}\r\n\r\n".encode("utf-8")
    try:
        stream.write(header + payload)
        stream.flush()
    except (OSError, ValueError) as exc:
        raise ChannelError(f"channel closed: {exc}") from exc


def _read_response(stream: BinaryIO, request_id: int) -> JSONObject:
    while True:
        message = _read_frame(stream)
        if "id" not in message:
            # Server notifications carry no id and are not answers.
            continue
        if message.get("id") == request_id:
            return message


class Channel:
    """Duplex connection to the analysis server, borrowed for one command.

    At most one request is in flight: a unary call holds the channel until
    its response frame is read, a streaming call until its lines are drained
    to end-of-stream.
    """

    def __init__(
        self,
        inbound: BinaryIO,
        outbound: BinaryIO,
        *,
        owned: tuple[socket.socket, ...] = (),
    ) -> None:
        self._inbound = inbound
        self._outbound = outbound
        self._next_id = 1
        self._in_flight: str | None = None
        self._owned = owned

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    def _begin(self, request: WireRequest) -> int:
        if self._in_flight is not None:
            raise ChannelError(
                f"request {request.method} issued while {self._in_flight} is in flight"
            )
        request_id = self._next_id
        self._next_id += 1
        _write_frame(
            self._outbound,
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "method": request.method,
                "params": request.params(),
            },
        )
        self._in_flight = request.method
        return request_id

    def rpc(self, request: WireRequest) -> JSONValue:
        request_id = self._begin(request)
        try:
            response = _read_response(self._inbound, request_id)
        finally:
            self._in_flight = None
        if response.get("error"):
            raise ChannelError(f"server error: {response['error']}")
        return response.get("result")

    def stream(self, request: WireRequest) -> Iterator[str]:
        """Send ``request`` now; return the response lines in received order."""
        self._begin(request)
        return self._drain_lines()

    def _drain_lines(self) -> Iterator[str]:
        while True:
            try:
                raw = _read(self._inbound.readline)
            except ChannelError:
                self._in_flight = None
                raise
            if not raw:
                self._in_flight = None
                return
            if not raw.endswith(b"\n"):
                self._in_flight = None
                raise ChannelError("channel truncated mid-line")
            # Undecodable bytes survive as surrogates so lines print back verbatim.
            yield raw[:-1].decode("utf-8", errors="surrogateescape")

    def close(self) -> None:
        for closer in (self._outbound, self._inbound, *self._owned):
            try:
                closer.close()
            except OSError:
                continue

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


def connect(socket_path: Path) -> Channel:
    """Open the server socket. No retry and no autostart happen here."""
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(str(socket_path))
    except OSError as exc:
        sock.close()
        raise ChannelError(f"could not connect to server at {socket_path}: {exc}") from exc
    return Channel(sock.makefile("rb"), sock.makefile("wb"), owned=(sock,))
