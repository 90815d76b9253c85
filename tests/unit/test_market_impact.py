"""Tests for ps_pricing.engine.market_impact."""

import pytest

from src.ps_common.enums import ImpactLevel, TradeDirection
from src.ps_pricing.engine.market_impact import (
    calculate_trade_impact,
    classify_impact,
    flash_multiplier_for,
    impact_description,
    should_trigger_flash,
)


class TestClassifyImpact:
    @pytest.mark.parametrize(
        "impact,level",
        [
            (0.0, ImpactLevel.MINIMAL),
            (0.0049, ImpactLevel.MINIMAL),
            (0.005, ImpactLevel.MODERATE),
            (0.02, ImpactLevel.SIGNIFICANT),
            (0.05, ImpactLevel.MAJOR),
            (0.10, ImpactLevel.MAJOR),
        ],
    )
    def test_thresholds(self, impact: float, level: ImpactLevel) -> None:
        assert classify_impact(impact) is level


class TestCalculateTradeImpact:
    def test_small_buy_is_minimal_but_broadcast(self) -> None:
        result = calculate_trade_impact(0.2, TradeDirection.BUY, 100, 100.0)
        assert result.impact_level is ImpactLevel.MINIMAL
        assert result.broadcast_required is True
        assert result.new_price == 100.02
        assert result.moves_market is False

    def test_tiny_trade_not_broadcast(self) -> None:
        result = calculate_trade_impact(0.2, TradeDirection.BUY, 10, 100.0)
        assert result.broadcast_required is False
        assert result.new_price == 100.0

    def test_moderate(self) -> None:
        # 0.003 * 1.4 * 1.5
        result = calculate_trade_impact(0.2, TradeDirection.BUY, 3000, 100.0)
        assert result.impact_level is ImpactLevel.MODERATE
        assert result.price_impact_percent == 0.63

    def test_significant(self) -> None:
        result = calculate_trade_impact(0.2, TradeDirection.BUY, 10_000, 100.0)
        assert result.impact_level is ImpactLevel.SIGNIFICANT
        assert result.new_price == 102.1

    def test_clamped_at_ten_percent(self) -> None:
        result = calculate_trade_impact(0.2, TradeDirection.BUY, 500_000, 100.0)
        assert result.impact_level is ImpactLevel.MAJOR
        assert result.price_impact == 10.0
        assert result.price_impact_percent == 10.0
        assert result.new_price == 110.0

    def test_sell_is_negative(self) -> None:
        result = calculate_trade_impact(0.2, TradeDirection.SELL, 10_000, 100.0)
        assert result.price_impact == -2.1
        assert result.new_price == 97.9

    def test_sell_respects_floor(self) -> None:
        result = calculate_trade_impact(0.5, TradeDirection.SELL, 500_000, 10.5)
        assert result.new_price == 10.0


class TestFlashHelpers:
    def test_trigger_on_major_or_size(self) -> None:
        major = calculate_trade_impact(0.2, TradeDirection.BUY, 500_000, 100.0)
        small = calculate_trade_impact(0.2, TradeDirection.BUY, 10, 100.0)
        assert should_trigger_flash(major, 500_000)
        assert should_trigger_flash(small, 500)
        assert not should_trigger_flash(small, 10)

    def test_multiplier_by_level(self) -> None:
        major = calculate_trade_impact(0.2, TradeDirection.BUY, 500_000, 100.0)
        minimal = calculate_trade_impact(0.2, TradeDirection.BUY, 10, 100.0)
        assert flash_multiplier_for(major) == 1.25
        assert flash_multiplier_for(minimal) == 1.0

    def test_description(self) -> None:
        assert "MASSIVE 900 share" in impact_description(ImpactLevel.MAJOR, 900, "X")
        assert impact_description(ImpactLevel.MINIMAL, 5, "X") == "Small trade of 5 shares"
