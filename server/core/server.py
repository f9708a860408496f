from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from server.config import SERVER_CONFIG
from shared.transport import TcpListener
from shared.utils.ticker import TickLoop

from .connection_manager import AuthenticatedCallback, ClosedCallback, ConnectionManager, MessageCallback

logger = logging.getLogger(__name__)


class SocketServer:
    """Listens on a TCP port and ticks a ConnectionManager from the asyncio loop.

    Usage:
        server = SocketServer(on_message=handle_message)
        await server.serve()
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        on_authenticated: Optional[AuthenticatedCallback] = None,
        on_message: Optional[MessageCallback] = None,
        on_connection_closed: Optional[ClosedCallback] = None,
    ) -> None:
        self.config = config or SERVER_CONFIG
        self.host: str = self.config["host"]
        self.port: int = int(self.config["port"])
        self.listener = TcpListener(self.host, self.port)
        self.connection_manager = ConnectionManager(
            self.config,
            listener=self.listener,
            on_authenticated=on_authenticated,
            on_message=on_message,
            on_connection_closed=on_connection_closed,
        )
        self._ticker = TickLoop(
            self.connection_manager.tick,
            float(self.config["tick_interval"]),
            stop_when=lambda: self.connection_manager.closed,
            name="server-tick",
        )

    def start(self) -> None:
        self.listener.start()
        logger.info("Server listening on %s:%s", *self.listener.address)
        self._ticker.start()

    async def serve(self) -> None:
        """Start listening and tick until the manager shuts down."""
        self.start()
        await self._ticker.wait()
        logger.info("Server stopped")

    def shutdown(self) -> None:
        self.connection_manager.shutdown()
