"""Tests for ps_trading.domain.trade_log.TradeLog."""

from datetime import datetime, timedelta
from typing import Any

import pytest

from src.ps_common.enums import AccountBook, OrderKind, TradeDirection
from src.ps_common.errors import InvalidInputError
from src.ps_trading.domain.models import Trade
from src.ps_trading.domain.trade_log import TradeLog

NOW = datetime(2026, 3, 1, 12, 0, 0)


def _make_trade(**kwargs: Any) -> Trade:
    shares = kwargs.get("shares", 10)
    price = kwargs.get("price", 20.0)
    return Trade(
        id=kwargs.get("id", "trd_1"),
        user_id=kwargs.get("user_id", "u1"),
        player_id=kwargs.get("player_id", "e"),
        player_name="Entity E",
        direction=kwargs.get("direction", TradeDirection.BUY),
        order_kind=OrderKind.MARKET,
        shares=shares,
        price=price,
        total_amount=shares * price,
        account_book=kwargs.get("account_book", AccountBook.SEASON),
        timestamp=kwargs.get("timestamp", NOW),
    )


class TestTradeLog:
    def test_newest_first(self) -> None:
        log = TradeLog(clock=lambda: NOW)
        for i in range(3):
            log.append(_make_trade(id=f"t{i}"))
        assert [t.id for t in log.recent()] == ["t2", "t1", "t0"]
        assert [t.id for t in log.recent(1)] == ["t2"]

    def test_capacity_drops_oldest(self) -> None:
        log = TradeLog(capacity=2, clock=lambda: NOW)
        for i in range(3):
            log.append(_make_trade(id=f"t{i}"))
        assert len(log) == 2
        assert [t.id for t in log.recent()] == ["t2", "t1"]


class TestForUser:
    def _log(self) -> TradeLog:
        log = TradeLog(clock=lambda: NOW)
        log.append(_make_trade(id="a", account_book=AccountBook.LIVE))
        log.append(_make_trade(id="b", direction=TradeDirection.SELL))
        log.append(_make_trade(id="c", user_id="u2"))
        log.append(_make_trade(id="d"))
        return log

    def test_filters(self) -> None:
        log = self._log()
        assert [t.id for t in log.for_user("u1").trades] == ["d", "b", "a"]
        assert [t.id for t in log.for_user("u1", account_book=AccountBook.LIVE).trades] == ["a"]
        assert [t.id for t in log.for_user("u1", direction=TradeDirection.SELL).trades] == ["b"]

    def test_pagination(self) -> None:
        page = self._log().for_user("u1", page=2, limit=2)
        assert [t.id for t in page.trades] == ["a"]
        assert page.total == 3
        assert page.total_pages == 2

    def test_bad_page(self) -> None:
        with pytest.raises(InvalidInputError):
            self._log().for_user("u1", page=0)


class TestVolume:
    def test_window_and_sides(self) -> None:
        log = TradeLog(clock=lambda: NOW)
        log.append(_make_trade(id="old", timestamp=NOW - timedelta(hours=2)))
        log.append(_make_trade(id="buy", shares=10, price=20.0))
        log.append(_make_trade(id="sell", shares=5, price=20.0, direction=TradeDirection.SELL))
        log.append(_make_trade(id="other", player_id="f"))

        hour = log.volume("e", "1h")
        assert hour.trade_count == 2
        assert hour.total_shares == 15
        assert hour.buy_volume == 200.0
        assert hour.sell_volume == 100.0
        assert hour.total_volume == 300.0
        assert hour.average_trade_size == 150.0
        assert log.volume("e", "24h").trade_count == 3

    def test_empty(self) -> None:
        volume = TradeLog(clock=lambda: NOW).volume("e")
        assert volume.trade_count == 0
        assert volume.average_trade_size == 0.0

    def test_unknown_window(self) -> None:
        with pytest.raises(InvalidInputError):
            TradeLog(clock=lambda: NOW).volume("e", "2w")
