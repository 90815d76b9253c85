"""PeriodicTask: asyncio sleep loop behind every simulation clock.

start() and stop() are idempotent. Ticks of one task never overlap: the next
sleep starts only after the callback returns. The callback is synchronous, so
stop() can only land between ticks, never inside one.
"""

import asyncio
import logging
from collections.abc import Callable

from src.ps_pricing.domain.models import EngineState

logger = logging.getLogger(__name__)


class PeriodicTask:
    def __init__(self, name: str, interval_seconds: float, callback: Callable[[], object]) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"{name}: interval must be positive, got {interval_seconds}")
        self.name = name
        self.interval_seconds = interval_seconds
        self._callback = callback
        self._task: asyncio.Task[None] | None = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def state(self) -> str:
        return EngineState.RUNNING if self.is_running else EngineState.STOPPED

    def start(self) -> bool:
        """Schedule the loop on the running event loop. False if already running."""
        if self.is_running:
            logger.info("%s already running", self.name)
            return False
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        logger.info("%s started (every %.1fs)", self.name, self.interval_seconds)
        return True

    def stop(self) -> bool:
        """Cancel future ticks. False if it was not running."""
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        logger.info("%s stopped after %d ticks", self.name, self.ticks)
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.ticks += 1
            try:
                self._callback()
            except Exception:
                # One bad tick must not kill the clock
                logger.exception("%s tick %d failed", self.name, self.ticks)
