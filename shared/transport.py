"""Poll-based byte-stream transports over TCP sockets.

Reads never block: callers ask ``data_available()`` first and only then
``read()``. Writes are synchronous ``sendall`` calls bounded by the socket
timeout.
"""

from __future__ import annotations

import logging
import select
import socket
from typing import Optional, Protocol, Tuple

from shared.protocol.constants import READ_BUFFER_SIZE
from shared.protocol.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_WRITE_TIMEOUT = 5.0


class Transport(Protocol):
    """Duplex byte stream as seen by the protocol core."""

    peername: str

    def data_available(self, timeout: float = 0.0) -> bool: ...

    def read(self, size: int = READ_BUFFER_SIZE) -> bytes: ...

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...


def _format_address(address) -> str:
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address) if address else "unknown"


class SocketTransport:
    """Transport backed by a connected stream socket."""

    def __init__(self, sock: socket.socket, write_timeout: float = DEFAULT_WRITE_TIMEOUT) -> None:
        self.sock = sock
        self.sock.settimeout(write_timeout)
        try:
            self.peername = _format_address(sock.getpeername())
        except OSError:
            self.peername = "unknown"
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def data_available(self, timeout: float = 0.0) -> bool:
        """True when a read will not block (data or end of stream is waiting)."""
        if self._closed:
            return False
        try:
            readable, _, _ = select.select([self.sock], [], [], timeout)
        except (OSError, ValueError) as exc:
            raise TransportError(f"Poll failed for {self.peername}: {exc}") from exc
        return bool(readable)

    def read(self, size: int = READ_BUFFER_SIZE) -> bytes:
        """Read up to `size` bytes; an empty result means the peer closed."""
        try:
            return self.sock.recv(size)
        except OSError as exc:
            raise TransportError(f"Read from {self.peername} failed: {exc}") from exc

    def write(self, data: bytes) -> None:
        try:
            self.sock.sendall(data)
        except OSError as exc:
            raise TransportError(f"Write to {self.peername} failed: {exc}") from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            try:
                self.sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # already disconnected by the peer
                pass
            self.sock.close()
        except OSError as exc:
            raise TransportError(f"Close of {self.peername} failed: {exc}") from exc


class TcpListener:
    """Listening socket polled for pending connections."""

    def __init__(self, host: str, port: int, backlog: int = 16) -> None:
        self.host = host
        self.port = port
        self.backlog = backlog
        self._sock: Optional[socket.socket] = None

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); useful when listening on port 0."""
        if self._sock is None:
            return self.host, self.port
        return self._sock.getsockname()[:2]

    @property
    def listening(self) -> bool:
        return self._sock is not None

    def start(self) -> None:
        if self._sock is not None:
            return
        try:
            self._sock = socket.create_server((self.host, self.port), backlog=self.backlog)
        except OSError as exc:
            raise TransportError(f"Cannot listen on {self.host}:{self.port}: {exc}") from exc
        logger.info("Listening on %s:%s", *self.address)

    def pending(self, timeout: float = 0.0) -> bool:
        """True when accept() will not block."""
        if self._sock is None:
            return False
        readable, _, _ = select.select([self._sock], [], [], timeout)
        return bool(readable)

    def accept(self) -> SocketTransport:
        if self._sock is None:
            raise TransportError("Listener is not started")
        try:
            sock, _ = self._sock.accept()
        except OSError as exc:
            raise TransportError(f"Accept failed: {exc}") from exc
        return SocketTransport(sock)

    def close(self) -> None:
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        try:
            sock.close()
        except OSError as exc:
            raise TransportError(f"Closing listener failed: {exc}") from exc


def open_connection(host: str, port: int, timeout: float = DEFAULT_WRITE_TIMEOUT) -> SocketTransport:
    """Connect to host:port and wrap the socket in a SocketTransport."""
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as exc:
        raise TransportError(f"Cannot connect to {host}:{port}: {exc}") from exc
    return SocketTransport(sock, write_timeout=timeout)


__all__ = ["Transport", "SocketTransport", "TcpListener", "open_connection"]
