from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from typing import Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[float], None]


class TickLoop:
    """Calls a tick(elapsed) callback at a fixed cadence on the running event loop.

    At most one tick is in flight at a time. The loop ends when `stop_when`
    returns True after a tick, or when stop() is awaited.
    """

    def __init__(
        self,
        callback: TickCallback,
        interval: float,
        stop_when: Optional[Callable[[], bool]] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "tick-loop",
    ) -> None:
        self.callback = callback
        self.interval = interval
        self.stop_when = stop_when
        self.clock = clock
        self.name = name
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=self.name)

    async def wait(self) -> None:
        """Block until the loop finishes on its own."""
        if self._task:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        last = self.clock()
        while True:
            await asyncio.sleep(self.interval)
            now = self.clock()
            elapsed, last = now - last, now
            try:
                self.callback(elapsed)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.exception("Tick failed in %s: %s", self.name, exc)
            self.ticks += 1
            if self.stop_when is not None and self.stop_when():
                break


__all__ = ["TickLoop", "TickCallback"]
