from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List, Optional

import pytest

from client.config import DEFAULT_CONFIG
from server.config import DEFAULT_SERVER_CONFIG
from shared.protocol import Command, TransportError, decode_command, encode_frame


class FakeTransport:
    """In-memory transport; writes are recorded and, when piped, delivered to the peer."""

    def __init__(self, peername: str = "test:0") -> None:
        self.peername = peername
        self.inbound: Deque[bytes] = deque()
        self.sent = bytearray()
        self.peer: Optional["FakeTransport"] = None
        self.eof = False
        self.closed = False
        self.fail_writes = False
        self.fail_close = False

    def feed(self, data: bytes) -> None:
        self.inbound.append(data)

    def feed_commands(self, *commands: Command) -> None:
        """Queue the commands as a single chunk, as one socket read would return them."""
        self.inbound.append(b"".join(encode_frame(command) for command in commands))

    def hang_up(self) -> None:
        self.eof = True

    def data_available(self, timeout: float = 0.0) -> bool:
        return bool(self.inbound) or self.eof

    def read(self, size: int = 4096) -> bytes:
        if not self.inbound:
            return b""
        chunk = self.inbound.popleft()
        if len(chunk) > size:
            self.inbound.appendleft(chunk[size:])
            chunk = chunk[:size]
        return chunk

    def write(self, data: bytes) -> None:
        if self.fail_writes or self.closed:
            raise TransportError("broken pipe")
        self.sent.extend(data)
        if self.peer is not None:
            self.peer.inbound.append(bytes(data))

    def close(self) -> None:
        self.closed = True
        if self.peer is not None:
            self.peer.eof = True
        if self.fail_close:
            raise TransportError("close failed")

    def sent_commands(self) -> List[Command]:
        return [decode_command(line) for line in bytes(self.sent).splitlines() if line]

    def clear(self) -> None:
        self.sent.clear()


def make_pipe() -> tuple[FakeTransport, FakeTransport]:
    server_side, client_side = FakeTransport("client:1"), FakeTransport("server:7777")
    server_side.peer, client_side.peer = client_side, server_side
    return server_side, client_side


class FakeListener:
    def __init__(self) -> None:
        self.queue: Deque[FakeTransport] = deque()
        self.closed = False

    def pending(self, timeout: float = 0.0) -> bool:
        return bool(self.queue)

    def accept(self) -> FakeTransport:
        return self.queue.popleft()

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def server_config():
    def _build(**overrides: Any) -> Dict[str, Any]:
        config = DEFAULT_SERVER_CONFIG.copy()
        config.update(overrides)
        return config

    return _build


@pytest.fixture
def client_config():
    def _build(**overrides: Any) -> Dict[str, Any]:
        config = DEFAULT_CONFIG.copy()
        config.update(overrides)
        return config

    return _build


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
