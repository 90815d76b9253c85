"""Tests for ps_pricing.engine.price_engine."""

import random
from unittest.mock import MagicMock

from src.ps_market.domain.models import PlayerStats
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_pricing.engine.price_engine import PriceSimulationEngine, performance_factor


def _fixed_rng(value: float) -> MagicMock:
    rng = MagicMock(spec=random.Random)
    rng.random.return_value = value
    return rng


class TestPerformanceFactor:
    def test_neutral_score(self, make_player) -> None:
        assert performance_factor(make_player()) == 0.0

    def test_clamped(self, make_player) -> None:
        star = make_player(stats=PlayerStats(100.0, 20.0, 20.0, 1.0, 0.5, 70, 40.0))
        scrub = make_player(stats=PlayerStats(0.0, 0.0, 0.0, 0.0, 0.0, 10, 5.0))
        assert performance_factor(star) == 0.02
        assert -0.02 <= performance_factor(scrub) < 0


class TestNextPrice:
    def test_midpoint_draw_leaves_price(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry, rng=_fixed_rng(0.5))
        assert engine.next_price(registry.get("e")) == 100.0

    def test_upper_draw(self, registry: PlayerRegistry) -> None:
        # noise 0.25*2*0.1*100 = 5, sentiment 0.05*100 = 5
        engine = PriceSimulationEngine(registry, rng=_fixed_rng(0.75))
        assert engine.next_price(registry.get("e")) == 110.0

    def test_lower_draw(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry, rng=_fixed_rng(0.0))
        assert engine.next_price(registry.get("e")) == 80.0

    def test_floor(self, registry: PlayerRegistry, make_player) -> None:
        registry.add(make_player(id="cheap", current_price=11.0, volatility=0.3))
        engine = PriceSimulationEngine(registry, rng=_fixed_rng(0.0))
        assert engine.next_price(registry.get("cheap")) == 10.0

    def test_volatility_boost(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(
            registry, rng=_fixed_rng(0.75), volatility_boost=lambda pid: 2.0
        )
        assert engine.next_price(registry.get("e")) == 115.0


class TestTick:
    def test_only_active_players(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry, rng=_fixed_rng(0.75))
        changes = engine.tick()
        assert {c.player_id for c in changes} == {"e", "f"}
        assert registry.get("bench").current_price == 40.0

    def test_hooks_run_once_per_cycle(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry, rng=_fixed_rng(0.75))
        hook = MagicMock()
        observer = MagicMock()
        engine.on_cycle(hook)
        engine.on_price_update(observer)
        engine.tick()
        hook.assert_called_once_with()
        assert observer.call_count == 2

    def test_hooks_see_new_prices(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry, rng=_fixed_rng(0.75))
        seen: list[float] = []
        engine.on_cycle(lambda: seen.append(registry.get("e").current_price))
        engine.tick()
        assert seen == [110.0]

    def test_failing_observer_does_not_stop_others(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry, rng=_fixed_rng(0.75))
        engine.on_price_update(MagicMock(side_effect=RuntimeError("boom")))
        good = MagicMock()
        engine.on_price_update(good)
        engine.tick()
        assert good.call_count == 2


class TestShockAndSetPrice:
    def test_shock_scenario(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry)
        observer = MagicMock()
        engine.on_price_update(observer)
        assert engine.apply_shock("e", 1.5, "buzzer beater") is True
        player_id, new_price, change = observer.call_args.args
        assert (player_id, new_price) == ("e", 150.0)
        assert change.change == 50.0
        assert change.change_percent == 50.0

    def test_shock_respects_floor(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry)
        engine.apply_shock("e", 0.01)
        assert registry.get("e").current_price == 10.0

    def test_unknown_player(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry)
        hook = MagicMock()
        engine.on_cycle(hook)
        assert engine.apply_shock("nobody", 2.0) is False
        assert engine.set_price("nobody", 20.0) is False
        hook.assert_not_called()

    def test_set_price_runs_hooks(self, registry: PlayerRegistry) -> None:
        engine = PriceSimulationEngine(registry)
        hook = MagicMock()
        engine.on_cycle(hook)
        assert engine.set_price("f", 55.555) is True
        assert registry.get("f").current_price == 55.56
        hook.assert_called_once_with()
