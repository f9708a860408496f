from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING

from shared.protocol import Command, auth_error_command, auth_required_command

if TYPE_CHECKING:
    from server.core.connection import Connection
    from server.core.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


class AuthService:
    """Password handshake: challenge on accept, check auth, reject or kick on mismatch."""

    def __init__(self, connection_manager: "ConnectionManager", password: str, kick_after_wrong_password: bool) -> None:
        self.connection_manager = connection_manager
        self.password = password
        self.kick_after_wrong_password = kick_after_wrong_password

    @property
    def required(self) -> bool:
        return bool(self.password)

    def on_accept(self, conn: "Connection") -> None:
        if not self.required:
            self.connection_manager.authenticate(conn)
            return
        logger.info("Waiting for %s to authenticate...", conn.id)
        self.connection_manager.write(conn, auth_required_command())

    def check_password(self, candidate: str) -> bool:
        return hmac.compare_digest(candidate.encode("utf-8", "surrogatepass"), self.password.encode("utf-8"))

    def handle_auth(self, command: Command, conn: "Connection") -> None:
        if self.check_password(command.args[0]):
            self.connection_manager.authenticate(conn)
            return
        logger.info("Client %s entered wrong password", conn.id)
        self.connection_manager.write(conn, auth_error_command())
        if self.kick_after_wrong_password:
            self.connection_manager.kick(conn.id)
