import asyncio
import logging
from contextlib import suppress
from typing import Optional

from shotclock.config import TICK_INTERVAL_SEC
from shotclock.events import Tick

logger = logging.getLogger(__name__)


class ShotClock:
    """
    Repeating one-tick-per-interval task for a MatchEngine.

    - Runs on the current asyncio loop, so ticks and user actions are
      serialised through the same engine entry point
    - Started/stopped by the engine after every transition (sync)
    - Never runs twice; leaving the async context cancels it
    """

    def __init__(self, engine, interval: float = TICK_INTERVAL_SEC):
        if interval <= 0:
            raise ValueError("interval must be positive")

        self._engine = engine
        self._interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sync(self, should_run: bool) -> None:
        if should_run and not self.is_running:
            self._task = asyncio.get_running_loop().create_task(self._run())
            logger.debug("Shot clock started")
        elif not should_run and self._task is not None:
            self._cancel()

    def close(self) -> None:
        self._cancel()

    async def _run(self):
        while True:
            await asyncio.sleep(self._interval)
            self._engine.process_event(Tick())

    def _cancel(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug("Shot clock stopped")

    # ---------------------------------------------------------
    # Scoped lifetime
    # ---------------------------------------------------------

    async def __aenter__(self) -> "ShotClock":
        self._engine.attach_clock(self)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self._engine.detach_clock()
        task = self._task
        self._cancel()
        if task is not None:
            with suppress(asyncio.CancelledError):
                await task
