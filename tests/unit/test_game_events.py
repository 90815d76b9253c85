"""Tests for ps_events.engine.game_events.GameEventGenerator."""

import random
from datetime import UTC, datetime
from unittest.mock import MagicMock

from src.ps_common.enums import GameEventType
from src.ps_events.domain.models import GameEventTemplate
from src.ps_events.engine.flash_board import FlashBoard
from src.ps_events.engine.game_events import SCRIPTED_EVENTS, GameEventGenerator
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_market.infrastructure.roster import load_roster
from src.ps_pricing.engine.price_engine import PriceSimulationEngine

NOW = datetime(2026, 3, 1, 20, 0, 0, tzinfo=UTC)

SCRIPT = (
    GameEventTemplate("Entity E", GameEventType.THREE_POINTER, "E from deep!", 15.50, 2.5, 4, "0:02"),
    GameEventTemplate("f", GameEventType.REBOUND, "F boards", -3.0),
)


def _make_generator(registry: PlayerRegistry, rng=None, probability: float = 0.4, scripted=SCRIPT):
    engine = PriceSimulationEngine(registry)
    board = FlashBoard(clock=lambda: NOW)
    generator = GameEventGenerator(
        registry, engine, board,
        rng=rng or random.Random(1),
        random_event_probability=probability,
        scripted=scripted,
        clock=lambda: NOW,
    )
    return generator, engine, board


class TestScriptedEvents:
    def test_plays_script_in_order(self, registry: PlayerRegistry) -> None:
        generator, _, board = _make_generator(registry)
        observer = MagicMock()
        generator.on_event(observer)

        first = generator.tick()
        assert first.player_id == "e"
        assert first.id.startswith("evt_")
        assert registry.get("e").current_price == 115.5
        assert board.multiplier_for("e") == 2.5
        observer.assert_called_once_with(first)

        second = generator.tick()
        assert second.player_id == "f"
        assert registry.get("f").current_price == 47.0
        assert board.get("f") is None
        assert generator.scripted_remaining == 0

    def test_event_price_goes_through_engine(self, registry: PlayerRegistry) -> None:
        generator, engine, _ = _make_generator(registry)
        price_observer = MagicMock()
        engine.on_price_update(price_observer)
        generator.tick()
        assert price_observer.call_args.args[:2] == ("e", 115.5)

    def test_unknown_player_is_skipped(self, registry: PlayerRegistry) -> None:
        script = (GameEventTemplate("Nobody", GameEventType.DUNK, "?", 5.0, 2.0),)
        generator, _, board = _make_generator(registry, scripted=script)
        assert generator.tick() is None
        assert board.active() == []

    def test_reset_script(self, registry: PlayerRegistry) -> None:
        generator, _, _ = _make_generator(registry, probability=0.0)
        generator.tick()
        generator.tick()
        assert generator.tick() is None
        generator.reset_script()
        assert generator.scripted_remaining == 2
        assert generator.tick().player_id == "e"

    def test_default_script_resolves_against_roster(self) -> None:
        registry = PlayerRegistry(load_roster(random.Random(5), all_playing=True))
        generator, _, board = _make_generator(registry, scripted=SCRIPTED_EVENTS)
        events = [generator.tick() for _ in SCRIPTED_EVENTS]
        assert all(e is not None for e in events)
        assert events[-1].player_id == "stephen-curry"
        assert board.multiplier_for("stephen-curry") == 5.0


class TestRandomEvents:
    def test_random_event_after_script(self, registry: PlayerRegistry) -> None:
        rng = MagicMock(spec=random.Random)
        rng.random.return_value = 0.8
        rng.choice.side_effect = lambda seq: seq[0]
        generator, _, board = _make_generator(registry, rng=rng, probability=1.0, scripted=())

        event = generator.tick()
        assert event.player_id == "e"
        assert event.event_type is GameEventType.BASKET
        assert event.description == "Entity E scores!"
        assert event.price_impact == 5.0
        assert registry.get("e").current_price == 105.0
        assert board.active() == []

    def test_no_event_when_probability_misses(self, registry: PlayerRegistry) -> None:
        generator, _, _ = _make_generator(registry, probability=0.0, scripted=())
        assert generator.tick() is None

    def test_tick_sweeps_flashes(self, registry: PlayerRegistry) -> None:
        generator, _, board = _make_generator(registry, probability=0.0, scripted=())
        board.sweep = MagicMock(return_value=[])
        generator.tick()
        board.sweep.assert_called_once_with()
