# arena_server/utils/scheduler.py
"""Timer abstraction so game services can run on asyncio or be driven by hand."""

import asyncio
from typing import Callable, Protocol

from loguru import logger


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        """Run `callback` once after `delay` seconds."""

    def start_ticker(
        self, interval: float, callback: Callable[[], bool]
    ) -> Cancellable:
        """Run `callback` every `interval` seconds until it returns False."""


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)

    def start_ticker(self, interval: float, callback: Callable[[], bool]) -> asyncio.Task:
        return asyncio.get_running_loop().create_task(self._tick_forever(interval, callback))

    async def _tick_forever(self, interval: float, callback: Callable[[], bool]):
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while True:
            next_tick += interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            try:
                if callback() is False:
                    return
            except Exception:
                logger.exception("Ticker callback failed")
