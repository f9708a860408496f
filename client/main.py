from __future__ import annotations

import asyncio
import logging
import sys
import threading

from client.config import CLIENT_CONFIG, load_config
from client.core import ClientSession, NetworkClient

logger = logging.getLogger(__name__)


def _forward_stdin(loop: asyncio.AbstractEventLoop, network: NetworkClient) -> None:
    """Send every line typed on stdin as a message; EOF disconnects."""
    for line in sys.stdin:
        loop.call_soon_threadsafe(network.send_message, line.rstrip("\n"))
    loop.call_soon_threadsafe(network.disconnect)


async def run_client() -> None:
    load_config()
    logging.basicConfig(level=CLIENT_CONFIG["log_level"])
    session = ClientSession(
        on_authenticated=lambda client_id: logger.info("Joined as client %s", client_id),
        on_message=print,
        on_closed=lambda: logger.info("Connection closed"),
    )
    network = NetworkClient(session)
    # The session is only touched from the loop thread; stdin lines are handed over via call_soon_threadsafe.
    reader = threading.Thread(
        target=_forward_stdin, args=(asyncio.get_running_loop(), network), name="client-stdin", daemon=True
    )
    reader.start()
    try:
        await network.run()
    finally:
        await network.close()


if __name__ == "__main__":
    asyncio.run(run_client())
