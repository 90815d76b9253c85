"""GameEventGenerator: scripted plays first, then random ones.

Each tick plays the next scripted event while any remain. After the script is
exhausted, a tick produces a random event with probability
random_event_probability.
"""

import logging
import random
from collections.abc import Callable, Sequence
from datetime import datetime

from src.ps_common.datetime_utils import utc_now
from src.ps_common.enums import GameEventType
from src.ps_common.id_generator import generate_id
from src.ps_common.money import round_money
from src.ps_events.domain.models import GameEvent, GameEventTemplate
from src.ps_events.engine.flash_board import FlashBoard
from src.ps_market.domain.models import Player
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_pricing.engine.price_engine import PriceSimulationEngine
from src.ps_pricing.engine.ticker import PeriodicTask

logger = logging.getLogger(__name__)

EventObserver = Callable[[GameEvent], None]

SCRIPTED_EVENTS: tuple[GameEventTemplate, ...] = (
    GameEventTemplate("LeBron James", GameEventType.THREE_POINTER,
                      "LeBron James hits a clutch three-pointer!", 15.50, 2.5, 3, "7:32"),
    GameEventTemplate("Stephen Curry", GameEventType.STEAL,
                      "Curry steals and hits a deep three!", 22.30, 3.2, 3, "4:12"),
    GameEventTemplate("Giannis Antetokounmpo", GameEventType.DUNK,
                      "Giannis with a thunderous dunk!", 8.75, 1.8, 4, "9:45"),
    GameEventTemplate("Luka Dončić", GameEventType.ASSIST,
                      "Luka with a no-look assist!", 5.20, 1.5, 4, "3:28"),
    GameEventTemplate("Joel Embiid", GameEventType.BLOCK,
                      "Embiid with a massive block!", 12.40, 2.1, 4, "1:15"),
    GameEventTemplate("Stephen Curry", GameEventType.THREE_POINTER,
                      "CURRY FOR THE WIN! Game-winning three!", 45.80, 5.0, 4, "0:02"),
)

RANDOM_EVENT_TYPES: tuple[GameEventType, ...] = (
    GameEventType.BASKET,
    GameEventType.ASSIST,
    GameEventType.REBOUND,
    GameEventType.STEAL,
    GameEventType.BLOCK,
)

_RANDOM_DESCRIPTIONS = {
    GameEventType.BASKET: "{name} scores!",
    GameEventType.ASSIST: "{name} with a great assist!",
    GameEventType.REBOUND: "{name} grabs the rebound!",
    GameEventType.STEAL: "{name} gets the steal!",
    GameEventType.BLOCK: "{name} with the block!",
}


class GameEventGenerator:
    def __init__(
        self,
        registry: PlayerRegistry,
        engine: PriceSimulationEngine,
        flash_board: FlashBoard,
        rng: random.Random | None = None,
        interval_seconds: float = 60.0,
        random_event_probability: float = 0.4,
        scripted: Sequence[GameEventTemplate] = SCRIPTED_EVENTS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._registry = registry
        self._engine = engine
        self._flash_board = flash_board
        self._rng = rng or random.Random()
        self._probability = random_event_probability
        self._scripted = tuple(scripted)
        self._next_scripted = 0
        self._clock = clock
        self._observers: list[EventObserver] = []
        self._task = PeriodicTask("game-events", interval_seconds, self.tick)

    def on_event(self, observer: EventObserver) -> None:
        self._observers.append(observer)

    @property
    def state(self) -> str:
        return self._task.state

    def start(self) -> bool:
        return self._task.start()

    def stop(self) -> bool:
        return self._task.stop()

    @property
    def scripted_remaining(self) -> int:
        return len(self._scripted) - self._next_scripted

    def reset_script(self) -> None:
        self._next_scripted = 0

    def tick(self) -> GameEvent | None:
        self._flash_board.sweep()

        if self._next_scripted < len(self._scripted):
            template = self._scripted[self._next_scripted]
            self._next_scripted += 1
            return self.play(template)

        if self._rng.random() < self._probability:
            return self.random_event()
        return None

    def play(self, template: GameEventTemplate) -> GameEvent | None:
        player = self._registry.get(template.player_ref) or self._registry.find_by_name(
            template.player_ref
        )
        if player is None:
            logger.warning("Game event skipped, unknown player %r", template.player_ref)
            return None
        return self._emit(player, template)

    def random_event(self) -> GameEvent | None:
        active = self._registry.list_active()
        if not active:
            return None
        player = self._rng.choice(active)
        event_type = self._rng.choice(RANDOM_EVENT_TYPES)
        template = GameEventTemplate(
            player_ref=player.id,
            event_type=event_type,
            description=_RANDOM_DESCRIPTIONS[event_type].format(name=player.name),
            price_impact=round_money((self._rng.random() - 0.3) * 10),
        )
        return self._emit(player, template)

    def _emit(self, player: Player, template: GameEventTemplate) -> GameEvent:
        event = GameEvent(
            id=generate_id("evt_"),
            timestamp=self._clock(),
            player_id=player.id,
            player_name=player.name,
            event_type=template.event_type,
            description=template.description,
            price_impact=template.price_impact,
            quarter=template.quarter,
            game_time=template.game_time,
            multiplier=template.multiplier,
        )
        self._engine.set_price(
            player.id, player.current_price + template.price_impact, template.description
        )
        logger.info("Game event: %s", event.description)

        for observer in self._observers:
            try:
                observer(event)
            except Exception:
                logger.exception("Game event observer failed for %s", event.id)

        if event.has_flash:
            self._flash_board.activate(
                player.id, player.name, event.multiplier, event.description
            )
        return event
