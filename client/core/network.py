from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from client.config import CLIENT_CONFIG
from shared.utils.ticker import TickLoop

from .session import ClientSession

logger = logging.getLogger(__name__)


class NetworkClient:
    """Connects a ClientSession with retry/backoff and ticks it on the asyncio loop."""

    def __init__(self, session: ClientSession, config: Optional[Dict[str, Any]] = None) -> None:
        self.session = session
        self.config = config or CLIENT_CONFIG
        self.host: str = self.config["server_host"]
        self.port: int = int(self.config["server_port"])
        self.backoff: float = float(self.config["reconnect_backoff"])
        self.max_backoff: float = float(self.config["max_reconnect_backoff"])
        self.max_retries: int = int(self.config["max_reconnect_retries"])
        self._ticker = TickLoop(
            self.session.tick,
            float(self.config["tick_interval"]),
            stop_when=lambda: self.session.closed,
            name="client-tick",
        )

    async def connect(self) -> bool:
        retries = 0
        delay = self.backoff
        while True:
            if self.session.connect(self.host, self.port):
                return True
            retries += 1
            if retries > self.max_retries:
                logger.error("Giving up on %s:%s after %s attempt(s)", self.host, self.port, retries)
                return False
            logger.warning("Connect attempt %s failed, retrying in %ss", retries, delay)
            await asyncio.sleep(delay)
            delay = min(delay * 2, self.max_backoff)

    async def run(self) -> bool:
        """Connect, then tick the session until it closes. False if connecting failed."""
        if not await self.connect():
            return False
        self._ticker.start()
        await self._ticker.wait()
        return True

    def send_message(self, text: str) -> bool:
        return self.session.send_message(text)

    def disconnect(self) -> None:
        self.session.disconnect()

    async def close(self) -> None:
        """Request a disconnect and tick once so the transport is closed right away."""
        self.session.disconnect()
        await self._ticker.stop()
        self.session.tick(0.0)
        logger.info("Network client closed")
