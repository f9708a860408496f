from __future__ import annotations

import asyncio
import logging

from server.config import SERVER_CONFIG, load_server_config
from server.core import SocketServer

logger = logging.getLogger(__name__)


async def run_server() -> None:
    load_server_config()
    logging.basicConfig(level=SERVER_CONFIG["log_level"])

    server: SocketServer

    def on_authenticated(client_id: int) -> None:
        server.connection_manager.broadcast_message(f"client {client_id} joined")

    # Relay every message to all connected clients
    def on_message(client_id: int, text: str) -> None:
        logger.info("Message from %s: %s", client_id, text)
        server.connection_manager.broadcast_message(f"{client_id}: {text}")

    def on_connection_closed(client_id: int) -> None:
        if server.connection_manager.running:
            server.connection_manager.broadcast_message(f"client {client_id} left")

    server = SocketServer(
        SERVER_CONFIG,
        on_authenticated=on_authenticated,
        on_message=on_message,
        on_connection_closed=on_connection_closed,
    )
    try:
        await server.serve()
    finally:
        server.shutdown()
        server.connection_manager.tick(0.0)


if __name__ == "__main__":
    asyncio.run(run_server())
