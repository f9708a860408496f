from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum, auto
from typing import Any, Dict, Optional

from client.config import CLIENT_CONFIG
from shared.protocol import (
    AuthStatus,
    Command,
    CommandName,
    InvalidCommandError,
    LineFramer,
    NotAuthenticatedError,
    ProtocolError,
    TransportError,
    auth_command,
    decode_command,
    encode_frame,
    message_command,
    ping_command,
    sent_by,
    validate_command,
)
from shared.protocol.constants import READ_BUFFER_SIZE
from shared.transport import Transport, open_connection

logger = logging.getLogger(__name__)

Handler = Callable[[Command], None]


class ClientState(Enum):
    UNAUTHENTICATED = auto()
    AWAITING_AUTH_REQUEST = auto()  # server asked for a password; auth goes out next tick
    AUTHENTICATED = auto()
    CLOSED = auto()


class ClientSession:
    """Client side of the protocol over a single server connection.

    The host calls tick(elapsed) at a regular cadence; everything (handshake,
    pings, reading and dispatching server commands, teardown) happens there.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        on_authenticated: Optional[Callable[[int], None]] = None,
        on_message: Optional[Callable[[str], None]] = None,
        on_closed: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or CLIENT_CONFIG
        self.ping_interval: float = float(self.config["ping_interval"])
        self.ignore_handler_errors: bool = bool(self.config["ignore_message_handler_exceptions"])
        self.connect_timeout: float = float(self.config["connect_timeout"])
        self.password: str = str(self.config["password"])
        self.on_authenticated = on_authenticated
        self.on_message = on_message
        self.on_closed = on_closed
        self.clock = clock

        self.transport: Optional[Transport] = None
        self.framer = LineFramer()
        self.authenticated = False
        self.client_id: Optional[int] = None
        self.last_ping_sent_at: Optional[float] = None
        self.last_heartbeat_at: Optional[float] = None
        self.latency: Optional[float] = None
        self._auth_requested = False
        self._ping_due_in = self.ping_interval
        self._running = False
        self._closed = True
        self._handlers: Dict[CommandName, Handler] = {
            CommandName.AUTH_STATUS: self._handle_auth_status,
            CommandName.HEARTBEAT: self._handle_heartbeat,
            CommandName.PONG: self._handle_pong,
            CommandName.MESSAGE: self._handle_message,
        }

    @property
    def running(self) -> bool:
        return self._running

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> ClientState:
        if self._closed:
            return ClientState.CLOSED
        if self.authenticated:
            return ClientState.AUTHENTICATED
        if self._auth_requested:
            return ClientState.AWAITING_AUTH_REQUEST
        return ClientState.UNAUTHENTICATED

    @property
    def ping_milliseconds(self) -> Optional[float]:
        return self.latency * 1000 if self.latency is not None else None

    # =========================================================================
    # CONNECTION LIFECYCLE
    # =========================================================================

    def connect(self, host: str, port: int, password: Optional[str] = None) -> bool:
        if not self._closed:
            logger.warning("Already connected, disconnect first")
            return False
        logger.info("Connecting to %s:%s...", host, port)
        try:
            transport = open_connection(host, port, timeout=self.connect_timeout)
        except TransportError as exc:
            logger.error("Error connecting to server: %s", exc)
            return False
        logger.info("Connected successfully!")
        self.attach(transport, password)
        return True

    def attach(self, transport: Transport, password: Optional[str] = None) -> None:
        """Start a session over an already connected transport."""
        if password is not None:
            self.password = password
        self.transport = transport
        self.framer = LineFramer()
        self.authenticated = False
        self.client_id = None
        self.last_ping_sent_at = None
        self.last_heartbeat_at = None
        self.latency = None
        self._auth_requested = False
        self._ping_due_in = self.ping_interval
        self._running = True
        self._closed = False

    def disconnect(self) -> None:
        logger.info("Disconnect requested")
        self._running = False

    def _teardown(self) -> None:
        if self._closed:
            return
        logger.info("Server closed, closing streams...")
        self._closed = True
        self._running = False
        self.authenticated = False
        self._auth_requested = False
        discarded = self.framer.close()
        if discarded:
            logger.debug("Discarding %s unterminated bytes", len(discarded))
        try:
            if self.transport is not None:
                self.transport.close()
        except (TransportError, OSError) as exc:
            logger.warning("Error closing streams: %s", exc)
        if self.on_closed:
            try:
                self.on_closed()
            except Exception as exc:
                logger.error("Error in close callback: %s", exc)

    # =========================================================================
    # SENDING
    # =========================================================================

    def _write(self, command: Command) -> None:
        if self.transport is None or self._closed:
            raise TransportError("Not connected")
        self.transport.write(encode_frame(command))

    def send_message(self, text: str) -> bool:
        try:
            if not self.authenticated:
                raise NotAuthenticatedError("Cannot send messages before authentication")
            self._write(message_command(text))
            return True
        except ProtocolError as exc:
            logger.warning("Error sending message to server: %s", exc)
            return False

    # =========================================================================
    # TICK
    # =========================================================================

    def tick(self, elapsed: float) -> None:
        if self._closed:
            return
        if not self._running:
            self._teardown()
            return
        try:
            self._tick_timers(elapsed)
            if not self._receive():
                logger.info("Server closed the connection")
                self._teardown()
        except Exception as exc:
            logger.error("Connection failed: %s", exc)
            self._teardown()

    def _tick_timers(self, elapsed: float) -> None:
        if self.authenticated:
            self._ping_due_in -= elapsed
            if self._ping_due_in <= 0:
                self._ping_due_in = self.ping_interval
                self.last_ping_sent_at = self.clock()
                logger.debug("Sending ping to server")
                self._write(ping_command())

        if self._auth_requested and not self.authenticated:
            logger.info("Sending password to server...")
            self._auth_requested = False
            self._write(auth_command(self.password))

    def _receive(self) -> bool:
        """Read at most one chunk and dispatch its lines; False once the server has closed."""
        if self.transport is None:
            raise TransportError("Not connected")
        if not self.transport.data_available():
            return True
        chunk = self.transport.read(READ_BUFFER_SIZE)
        if not chunk:
            return False
        for line in self.framer.feed(chunk):
            try:
                self._handle_line(line)
            except Exception as exc:
                if self.ignore_handler_errors:
                    logger.warning("Command handler threw %r", exc)
                    continue
                logger.error("Command handler threw %r", exc)
                raise
        return True

    def _handle_line(self, line: bytes) -> None:
        command = decode_command(line)
        validate_command(command)
        handler = self._handlers.get(command.kind) if command.kind else None
        if handler is None or not sent_by(command.kind, "server"):
            raise InvalidCommandError(f"Command {command.name!r} is not accepted from the server")
        handler(command)

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def _handle_auth_status(self, command: Command) -> None:
        status = command.args[0]
        if status == AuthStatus.REQUIRED:
            if self.authenticated:
                logger.warning("Server requested authentication after success, ignoring")
                return
            logger.info("Authentication is required.")
            self._auth_requested = True
        elif status == AuthStatus.SUCCESS:
            if self.authenticated:
                logger.warning("Duplicate authentication success ignored")
                return
            self.authenticated = True
            self._auth_requested = False
            self._ping_due_in = self.ping_interval
            self.client_id = int(command.args[1])
            logger.info("Authenticated successfully! id: %s", self.client_id)
            if self.on_authenticated:
                self.on_authenticated(self.client_id)
        else:
            logger.warning("Authentication error: %s", command.args[1])
            self._running = False

    def _handle_heartbeat(self, command: Command) -> None:
        self.last_heartbeat_at = self.clock()
        logger.debug("Received heartbeat from server.")

    def _handle_pong(self, command: Command) -> None:
        if self.last_ping_sent_at is None:
            raise InvalidCommandError("pong received without an outstanding ping")
        self.latency = self.clock() - self.last_ping_sent_at
        logger.debug("Received pong. Current ping is %.1fms.", self.ping_milliseconds)

    def _handle_message(self, command: Command) -> None:
        if self.on_message:
            self.on_message(command.args[0])
        else:
            logger.debug("Dropping message: no handler registered")


__all__ = ["ClientSession", "ClientState"]
