from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto

from shared.protocol import LineFramer, TransportError
from shared.transport import Transport

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    UNAUTHENTICATED = auto()
    AUTHENTICATED = auto()
    PENDING_KICK = auto()
    CLOSED = auto()


@dataclass
class Connection:
    """Server-side state of one accepted transport."""

    id: int
    transport: Transport
    heartbeat_due_in: float
    authenticated: bool = False
    pending_kick: bool = False
    closed: bool = False
    framer: LineFramer = field(default_factory=LineFramer)
    connected_at: float = field(default_factory=time.monotonic)

    @property
    def peername(self) -> str:
        return getattr(self.transport, "peername", "unknown")

    @property
    def state(self) -> ConnectionState:
        if self.closed:
            return ConnectionState.CLOSED
        if self.pending_kick:
            return ConnectionState.PENDING_KICK
        if self.authenticated:
            return ConnectionState.AUTHENTICATED
        return ConnectionState.UNAUTHENTICATED

    def close(self) -> None:
        """Close the transport; failures are logged, teardown always completes."""
        if self.closed:
            return
        self.closed = True
        discarded = self.framer.close()
        if discarded:
            logger.debug("Discarding %s unterminated bytes from %s", len(discarded), self.id)
        try:
            self.transport.close()
        except (TransportError, OSError) as exc:
            logger.warning("Error closing client %s: %s", self.id, exc)
