from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Dict, List, Optional

from server.config import SERVER_CONFIG
from server.services import AuthService, MessageService, PresenceService
from shared.protocol import (
    Command,
    CommandName,
    NotAuthenticatedError,
    TransportError,
    UnknownConnectionError,
    auth_success_command,
    decode_command,
    encode_frame,
    message_command,
    validate_command,
)
from shared.protocol.constants import READ_BUFFER_SIZE
from shared.transport import TcpListener, Transport

from .connection import Connection
from .router import CommandRouter

logger = logging.getLogger(__name__)

AuthenticatedCallback = Callable[[int], None]
MessageCallback = Callable[[int, str], None]
ClosedCallback = Callable[[int], None]


class ConnectionManager:
    """Owns every accepted connection and runs the server side of the protocol.

    All state changes happen inside tick() or in the operations the host calls
    between ticks; kick() and shutdown() only set flags that the next tick acts
    on, so the connection map is never mutated while it is being iterated.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        listener: Optional[TcpListener] = None,
        on_authenticated: Optional[AuthenticatedCallback] = None,
        on_message: Optional[MessageCallback] = None,
        on_connection_closed: Optional[ClosedCallback] = None,
    ) -> None:
        self.config = config or SERVER_CONFIG
        self.heartbeat_interval: float = float(self.config["heartbeat_interval"])
        self.ignore_handler_errors: bool = bool(self.config["ignore_message_handler_exceptions"])
        self.lifetime_remaining: float = float(self.config["session_lifetime"])
        self.listener = listener
        self.on_authenticated = on_authenticated
        self.on_message = on_message
        self.on_connection_closed = on_connection_closed

        self._connections: Dict[int, Connection] = {}
        self._next_id = 0
        self._running = True
        self._closed = False

        self.auth_service = AuthService(
            self,
            password=str(self.config["password"]),
            kick_after_wrong_password=bool(self.config["kick_after_wrong_password"]),
        )
        self.presence_service = PresenceService(self, self.heartbeat_interval)
        self.message_service = MessageService(self)
        self.router = CommandRouter()
        self.router.register(CommandName.PING, self.presence_service.handle_ping)
        self.router.register(CommandName.MESSAGE, self.message_service.handle_message)

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    @property
    def running(self) -> bool:
        return self._running

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def connection_ids(self) -> List[int]:
        return list(self._connections.keys())

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def get(self, client_id: int) -> Connection:
        conn = self._connections.get(client_id)
        if conn is None:
            raise UnknownConnectionError(client_id)
        return conn

    def is_authenticated(self, client_id: int) -> bool:
        return self.get(client_id).authenticated

    # =========================================================================
    # CONNECTION LIFECYCLE
    # =========================================================================

    def accept(self, transport: Transport) -> int:
        """Register a new transport and start its handshake; returns the connection id."""
        client_id = self._next_id
        self._next_id += 1
        conn = Connection(id=client_id, transport=transport, heartbeat_due_in=self.heartbeat_interval)
        self._connections[client_id] = conn
        logger.info("%s connected; id: %s", conn.peername, client_id)
        try:
            self.auth_service.on_accept(conn)
        except TransportError as exc:
            logger.error("Handshake with %s failed: %s", client_id, exc)
            conn.pending_kick = True
        except Exception:
            # on_authenticated escalated under the strict handler policy
            conn.pending_kick = True
        return client_id

    def authenticate(self, conn: Connection) -> None:
        logger.info("Client %s authenticated successfully", conn.id)
        conn.authenticated = True
        self.write(conn, auth_success_command(conn.id))
        if self.on_authenticated is None:
            return
        try:
            self.on_authenticated(conn.id)
        except Exception as exc:
            if self.ignore_handler_errors:
                logger.warning("Authenticated callback threw for %s: %r", conn.id, exc)
                return
            logger.error("Authenticated callback threw for %s: %r", conn.id, exc)
            raise

    def kick(self, client_id: int) -> None:
        """Mark a connection for teardown on the next tick; repeated calls are no-ops."""
        conn = self.get(client_id)
        if conn.pending_kick:
            return
        logger.info("Client %s will be kicked", client_id)
        conn.pending_kick = True

    def shutdown(self) -> None:
        logger.info("Shutdown requested")
        self._running = False

    def _teardown(self, conn: Connection) -> None:
        if self._connections.pop(conn.id, None) is None:
            return
        logger.info("Client %s disconnected, closing streams...", conn.id)
        conn.close()
        if self.on_connection_closed:
            try:
                self.on_connection_closed(conn.id)
            except Exception as exc:
                logger.error("Error in close callback for %s: %s", conn.id, exc)

    def _close_all(self) -> None:
        if self.listener is not None:
            logger.info("Stopping tcp listener...")
            try:
                self.listener.close()
            except (TransportError, OSError) as exc:
                logger.warning("Error stopping listener: %s", exc)
        logger.info("Closing client streams...")
        for conn in list(self._connections.values()):
            self._teardown(conn)
        self._closed = True

    # =========================================================================
    # SENDING
    # =========================================================================

    def write(self, conn: Connection, command: Command) -> None:
        """Encode and write a command; raises TransportError on failure."""
        conn.transport.write(encode_frame(command))

    def send(self, client_id: int, command: Command) -> bool:
        conn = self.get(client_id)
        try:
            self.write(conn, command)
            return True
        except TransportError as exc:
            logger.warning("Error sending %s to %s: %s", command.name, client_id, exc)
            return False

    def send_message(self, client_id: int, text: str) -> bool:
        return self.send(client_id, message_command(text))

    def broadcast(self, command: Command) -> int:
        """Best-effort send to every active connection; returns how many writes succeeded."""
        delivered = 0
        for client_id in self.connection_ids:
            if self.send(client_id, command):
                delivered += 1
        return delivered

    def broadcast_message(self, text: str) -> int:
        return self.broadcast(message_command(text))

    # =========================================================================
    # TICK
    # =========================================================================

    def tick(self, elapsed: float) -> None:
        if self._closed:
            return
        if self._running:
            self.lifetime_remaining -= elapsed
            if self.lifetime_remaining <= 0:
                logger.info("Lifetime expired")
                self._running = False
        if not self._running:
            self._close_all()
            return

        self._accept_pending()
        for conn in list(self._connections.values()):
            self._tick_connection(conn, elapsed)

    def _accept_pending(self) -> None:
        if self.listener is None:
            return
        while self.listener.pending():
            try:
                transport = self.listener.accept()
            except TransportError as exc:
                logger.warning("Accept failed: %s", exc)
                return
            self.accept(transport)

    def _tick_connection(self, conn: Connection, elapsed: float) -> None:
        if conn.pending_kick:
            logger.info("Client %s should be kicked...", conn.id)
            self._teardown(conn)
            return
        try:
            self.presence_service.tick(conn, elapsed)
            if not self._receive(conn):
                logger.info("Client %s closed the connection", conn.id)
                self._teardown(conn)
        except Exception as exc:
            logger.error("Dropping client %s: %s", conn.id, exc)
            self._teardown(conn)

    def _receive(self, conn: Connection) -> bool:
        """Read at most one chunk and dispatch its lines; False once the peer has closed."""
        if not conn.transport.data_available():
            return True
        chunk = conn.transport.read(READ_BUFFER_SIZE)
        if not chunk:
            return False
        for line in conn.framer.feed(chunk):
            try:
                self._handle_line(conn, line)
            except Exception as exc:
                if self.ignore_handler_errors:
                    logger.warning("Command handler threw for %s: %r", conn.id, exc)
                    continue
                logger.error("Command handler threw for %s: %r", conn.id, exc)
                raise
        return True

    def _handle_line(self, conn: Connection, line: bytes) -> None:
        command = decode_command(line)
        if not conn.authenticated and command.kind is not CommandName.AUTH:
            raise NotAuthenticatedError(f"{command.name} received from {conn.id} before authentication")
        validate_command(command)
        if conn.authenticated:
            self.router.dispatch(command, conn)
        else:
            self.auth_service.handle_auth(command, conn)


__all__ = ["ConnectionManager"]
