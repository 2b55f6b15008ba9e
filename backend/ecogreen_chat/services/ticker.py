"""
Periodic tick on the event loop.

Usage:
    async with Ticker(30, sweep):
        ...
    # task is cancelled and awaited here, even on error
"""
import asyncio
import inspect
from typing import Awaitable, Callable, Optional, Union

from ecogreen_chat.utils.logger import get_logger

logger = get_logger(__name__)

TickCallback = Callable[[], Union[None, Awaitable[None]]]


class Ticker:
    """Call a function every `interval` seconds until stopped."""

    def __init__(self, interval: float, callback: TickCallback, name: str = "ticker"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Calling start() on a running ticker does nothing."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=self.name)

    async def stop(self) -> None:
        """Cancel the tick task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.ticks += 1
            try:
                result = self.callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                # one bad tick must not stop the schedule
                logger.exception(f"{self.name} tick failed: {e}")

    async def __aenter__(self) -> "Ticker":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
