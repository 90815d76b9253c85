"""FlashBoard — active flash multipliers keyed by player.

An entry lives until sweep() observes now - start_time >= duration. While it
lives, the price engine scales that player's tick volatility by
FLASH_VOLATILITY_BOOST (see volatility_factor).
"""

import logging
from collections.abc import Callable
from datetime import datetime

from src.ps_common.datetime_utils import utc_now
from src.ps_events.domain.models import FlashMultiplier
from src.ps_pricing.engine.ticker import PeriodicTask

logger = logging.getLogger(__name__)

DEFAULT_FLASH_SECONDS = 30.0
FLASH_VOLATILITY_BOOST = 2.5

FlashObserver = Callable[[FlashMultiplier], None]


class FlashBoard:
    def __init__(
        self,
        duration_seconds: float = DEFAULT_FLASH_SECONDS,
        sweep_seconds: float = 5.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._duration = duration_seconds
        self._clock = clock
        self._active: dict[str, FlashMultiplier] = {}
        self._on_activated: list[FlashObserver] = []
        self._on_expired: list[FlashObserver] = []
        self._task = PeriodicTask("flash-sweep", sweep_seconds, self.sweep)

    def on_activated(self, observer: FlashObserver) -> None:
        self._on_activated.append(observer)

    def on_expired(self, observer: FlashObserver) -> None:
        self._on_expired.append(observer)

    def start(self) -> bool:
        return self._task.start()

    def stop(self) -> bool:
        return self._task.stop()

    @property
    def is_running(self) -> bool:
        return self._task.is_running

    def activate(
        self,
        player_id: str,
        player_name: str,
        multiplier: float,
        description: str,
        duration_seconds: float | None = None,
    ) -> FlashMultiplier:
        """Register (or replace) the player's flash multiplier and notify observers."""
        flash = FlashMultiplier(
            player_id=player_id,
            player_name=player_name,
            multiplier=multiplier,
            duration=duration_seconds if duration_seconds is not None else self._duration,
            start_time=self._clock(),
            event_description=description,
        )
        self._active[player_id] = flash
        logger.info("Flash multiplier %.1fx on %s for %.0fs", multiplier, player_id, flash.duration)
        self._notify(self._on_activated, flash)
        return flash

    def sweep(self, now: datetime | None = None) -> list[FlashMultiplier]:
        now = now or self._clock()
        expired = [f for f in self._active.values() if f.is_expired(now)]
        for flash in expired:
            del self._active[flash.player_id]
            flash.is_active = False
            logger.info("Flash multiplier on %s expired", flash.player_id)
            self._notify(self._on_expired, flash)
        return expired

    def active(self) -> list[FlashMultiplier]:
        return list(self._active.values())

    def get(self, player_id: str) -> FlashMultiplier | None:
        flash = self._active.get(player_id)
        if flash is None or flash.is_expired(self._clock()):
            return None
        return flash

    def multiplier_for(self, player_id: str) -> float | None:
        flash = self.get(player_id)
        return flash.multiplier if flash else None

    def volatility_factor(self, player_id: str) -> float:
        return FLASH_VOLATILITY_BOOST if self.get(player_id) else 1.0

    def _notify(self, observers: list[FlashObserver], flash: FlashMultiplier) -> None:
        for observer in observers:
            try:
                observer(flash)
            except Exception:
                logger.exception("Flash observer failed for %s", flash.player_id)
