"""PriceSimulationEngine — the periodic price process over the player registry.

Every price mutation (tick, shock, absolute set) flows through the same
pipeline: registry.update_price -> cycle hooks (once) -> on_price_update
observers. Observers are the only bridge to fan-out; hooks are for work that
must see the whole cycle's prices (portfolio sync, limit-order evaluation).
"""

import logging
import random
from collections.abc import Callable

from src.ps_common.money import clamp_price, round_money
from src.ps_market.domain.models import Player, PriceChange
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_pricing.engine.ticker import PeriodicTask

logger = logging.getLogger(__name__)

PriceObserver = Callable[[str, float, PriceChange], None]
CycleHook = Callable[[], None]
VolatilityBoost = Callable[[str], float]

MAX_PERFORMANCE_FACTOR = 0.02
MAX_SENTIMENT_FACTOR = 0.10


def performance_factor(player: Player) -> float:
    s = player.stats
    score = s.ppg * 0.4 + s.apg * 0.3 + s.rpg * 0.2 + s.fg * 0.1
    factor = (score - 20) / 30 * 0.02
    return max(-MAX_PERFORMANCE_FACTOR, min(MAX_PERFORMANCE_FACTOR, factor))


class PriceSimulationEngine:
    def __init__(
        self,
        registry: PlayerRegistry,
        rng: random.Random | None = None,
        interval_seconds: float = 10.0,
        volatility_boost: VolatilityBoost | None = None,
    ) -> None:
        self._registry = registry
        self._rng = rng or random.Random()
        self._volatility_boost = volatility_boost
        self._observers: list[PriceObserver] = []
        self._hooks: list[CycleHook] = []
        self._task = PeriodicTask("price-simulation", interval_seconds, self.tick)

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def on_price_update(self, observer: PriceObserver) -> None:
        self._observers.append(observer)

    def on_cycle(self, hook: CycleHook) -> None:
        self._hooks.append(hook)

    def set_volatility_boost(self, boost: VolatilityBoost | None) -> None:
        self._volatility_boost = boost

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> str:
        return self._task.state

    @property
    def is_running(self) -> bool:
        return self._task.is_running

    def start(self) -> bool:
        return self._task.start()

    def stop(self) -> bool:
        return self._task.stop()

    # ------------------------------------------------------------------
    # Price process
    # ------------------------------------------------------------------

    def next_price(self, player: Player) -> float:
        volatility = player.volatility
        if self._volatility_boost is not None:
            volatility *= self._volatility_boost(player.id)

        price = player.current_price
        noise = (self._rng.random() - 0.5) * 2 * volatility * price
        sentiment = (self._rng.random() - 0.5) * 0.2
        sentiment = max(-MAX_SENTIMENT_FACTOR, min(MAX_SENTIMENT_FACTOR, sentiment))
        perf = performance_factor(player)
        return clamp_price(round_money(price + noise + perf * price + sentiment * price))

    def tick(self) -> list[PriceChange]:
        """One simulation cycle over every active player."""
        changes: list[PriceChange] = []
        for player in self._registry.list_active():
            try:
                change = self._registry.update_price(player.id, self.next_price(player))
            except Exception:
                logger.exception("Price update failed for %s, skipping", player.id)
                continue
            if change is not None:
                changes.append(change)

        self._finish_cycle(changes)
        logger.debug("Price tick updated %d players", len(changes))
        return changes

    def apply_shock(self, player_id: str, multiplier: float, reason: str = "") -> bool:
        player = self._registry.get(player_id)
        if player is None:
            logger.warning("Shock ignored, unknown player %s", player_id)
            return False
        return self.set_price(player_id, player.current_price * multiplier, reason)

    def set_price(self, player_id: str, new_price: float, reason: str = "") -> bool:
        """Move one player to an absolute (floored) price through the full pipeline."""
        try:
            change = self._registry.update_price(player_id, clamp_price(round_money(new_price)))
        except Exception:
            logger.exception("set_price failed for %s", player_id)
            return False
        if change is None:
            logger.warning("set_price ignored, unknown player %s", player_id)
            return False

        logger.info(
            "Price of %s %.2f -> %.2f (%s)",
            player_id, change.old_price, change.new_price, reason or "manual",
        )
        self._finish_cycle([change])
        return True

    def _finish_cycle(self, changes: list[PriceChange]) -> None:
        for hook in self._hooks:
            try:
                hook()
            except Exception:
                logger.exception("Price cycle hook %r failed", hook)

        for change in changes:
            for observer in self._observers:
                try:
                    observer(change.player_id, change.new_price, change)
                except Exception:
                    logger.exception("Price observer failed for %s", change.player_id)
