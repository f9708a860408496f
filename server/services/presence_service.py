from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shared.protocol import Command, heartbeat_command, pong_command

if TYPE_CHECKING:
    from server.core.connection import Connection
    from server.core.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


class PresenceService:
    """Liveness traffic: periodic heartbeats out, pong replies to pings."""

    def __init__(self, connection_manager: "ConnectionManager", heartbeat_interval: float) -> None:
        self.connection_manager = connection_manager
        self.heartbeat_interval = heartbeat_interval

    def tick(self, conn: "Connection", elapsed: float) -> None:
        conn.heartbeat_due_in -= elapsed
        if conn.heartbeat_due_in > 0:
            return
        conn.heartbeat_due_in = self.heartbeat_interval
        logger.debug("Sending heartbeat to %s...", conn.id)
        self.connection_manager.write(conn, heartbeat_command())

    def handle_ping(self, command: Command, conn: "Connection") -> None:
        self.connection_manager.write(conn, pong_command())
