"""Unit-test factories for the in-memory market."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from src.ps_account.domain.ledger import PortfolioLedger
from src.ps_market.domain.models import Player, PlayerStats
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_trading.domain.trade_log import TradeLog
from src.ps_trading.engine.settlement import TradeSettlementService

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)

# Score exactly 20 -> zero performance drift
NEUTRAL_STATS = PlayerStats(ppg=20.0, rpg=20.0, apg=20.0, fg=20.0, three_pt=0.35,
                            games_played=60, minutes_per_game=34.0)


def _make_player(**kwargs: Any) -> Player:
    return Player(
        id=kwargs.get("id", "test-player"),
        name=kwargs.get("name", "Test Player"),
        team=kwargs.get("team", "TST"),
        position=kwargs.get("position", "SF"),
        current_price=kwargs.get("current_price", 100.0),
        volatility=kwargs.get("volatility", 0.1),
        stats=kwargs.get("stats", NEUTRAL_STATS),
        is_playing=kwargs.get("is_playing", True),
    )


@pytest.fixture
def make_player() -> Callable[..., Player]:
    return _make_player


@pytest.fixture
def registry() -> PlayerRegistry:
    return PlayerRegistry(
        [
            _make_player(id="e", name="Entity E", current_price=100.0, volatility=0.1),
            _make_player(id="f", name="Entity F", current_price=50.0, volatility=0.3),
            _make_player(id="bench", name="Bench Guy", current_price=40.0, is_playing=False),
        ],
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def ledger() -> PortfolioLedger:
    return PortfolioLedger(starting_balance=1000.0, live_trades_per_session=5,
                           clock=lambda: FIXED_NOW)


@pytest.fixture
def trade_log() -> TradeLog:
    return TradeLog(clock=lambda: FIXED_NOW)


@pytest.fixture
def settlement(
    registry: PlayerRegistry, ledger: PortfolioLedger, trade_log: TradeLog
) -> TradeSettlementService:
    """Settlement without market impact: prices only move when a test moves them."""
    return TradeSettlementService(
        registry, ledger, trade_log, apply_market_impact=False, clock=lambda: FIXED_NOW
    )
