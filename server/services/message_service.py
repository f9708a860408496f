from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shared.protocol import Command

if TYPE_CHECKING:
    from server.core.connection import Connection
    from server.core.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, connection_manager: "ConnectionManager") -> None:
        self.connection_manager = connection_manager

    def handle_message(self, command: Command, conn: "Connection") -> None:
        callback = self.connection_manager.on_message
        if callback is None:
            logger.debug("Dropping message from %s: no handler registered", conn.id)
            return
        callback(conn.id, command.args[0])
