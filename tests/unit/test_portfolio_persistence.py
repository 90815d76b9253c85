"""Unit tests for SqlPortfolioStore using a MagicMock session factory."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.ps_account.domain.models import Holding, Portfolio
from src.ps_account.infrastructure.db_models import HoldingORM, PortfolioORM, TradeORM
from src.ps_account.infrastructure.persistence import SqlPortfolioStore, _holding_params, _trade_params
from src.ps_common.enums import AccountBook, OrderKind, TradeDirection
from src.ps_common.errors import TransientBackendError
from src.ps_trading.domain.models import Trade

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


def _make_portfolio_row(**kwargs):
    row = MagicMock()
    row.user_id = kwargs.get("user_id", "u1")
    row.available_balance = kwargs.get("available_balance", 500)
    row.trades_remaining = kwargs.get("trades_remaining", 3)
    row.last_updated = NOW
    return row


def _make_holding_row(**kwargs):
    row = MagicMock()
    row.account_book = kwargs.get("account_book", "season")
    row.player_id = kwargs.get("player_id", "e")
    row.player_name = kwargs.get("player_name", "Entity E")
    row.shares = kwargs.get("shares", 5)
    row.average_price = kwargs.get("average_price", 100)
    row.current_price = kwargs.get("current_price", 110)
    row.purchase_date = NOW
    return row


def _result(one=None, many=None):
    result = MagicMock()
    result.fetchone.return_value = one
    result.fetchall.return_value = many or []
    return result


@pytest.fixture
def db():
    session = MagicMock()
    session.begin.return_value.__aenter__ = AsyncMock(return_value=session)
    session.begin.return_value.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.fixture
def store(db) -> SqlPortfolioStore:
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=db)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return SqlPortfolioStore(factory)


class TestLoadPortfolio:
    @pytest.mark.asyncio
    async def test_missing_user(self, db, store: SqlPortfolioStore) -> None:
        db.execute = AsyncMock(return_value=_result(one=None))
        assert await store.load_portfolio("ghost") is None
        db.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rebuilds_books(self, db, store: SqlPortfolioStore) -> None:
        db.execute = AsyncMock(
            side_effect=[
                _result(one=_make_portfolio_row()),
                _result(many=[
                    _make_holding_row(),
                    _make_holding_row(account_book="live", player_id="f", shares=2,
                                      average_price=50, current_price=40),
                ]),
            ]
        )
        portfolio = await store.load_portfolio("u1")
        assert portfolio.available_balance == 500.0
        assert portfolio.trades_remaining == 3
        assert portfolio.season_holdings["e"].unrealized_pl == 50.0
        assert portfolio.live_holdings["f"].total_value == 80.0
        assert portfolio.total_value == 1130.0


class TestSavePortfolio:
    @pytest.mark.asyncio
    async def test_upsert_then_rewrite_holdings(self, db, store: SqlPortfolioStore) -> None:
        db.execute = AsyncMock(return_value=_result())
        portfolio = Portfolio("u1", 500.0, 5, NOW)
        portfolio.live_holdings["f"] = Holding("f", "Entity F", 2, 50.0, 50.0, NOW)
        portfolio.recompute_totals()

        assert await store.save_portfolio(portfolio) is True
        assert db.execute.await_count == 3
        upsert_params = db.execute.await_args_list[0].args[1]
        assert upsert_params["total_value"] == 600.0
        holding_rows = db.execute.await_args_list[2].args[1]
        assert holding_rows == [{
            "user_id": "u1", "account_book": "live", "player_id": "f",
            "player_name": "Entity F", "shares": 2, "average_price": 50.0,
            "current_price": 50.0, "purchase_date": NOW,
        }]

    @pytest.mark.asyncio
    async def test_no_holdings_skips_insert(self, db, store: SqlPortfolioStore) -> None:
        db.execute = AsyncMock(return_value=_result())
        await store.save_portfolio(Portfolio("u1", 1000.0, 5, NOW))
        assert db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_driver_failure_is_transient(self, db, store: SqlPortfolioStore) -> None:
        db.execute = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down")))
        with pytest.raises(TransientBackendError):
            await store.save_portfolio(Portfolio("u1", 1000.0, 5, NOW))


class TestAppendTrade:
    def _trade(self) -> Trade:
        return Trade(
            id="trd_1", user_id="u1", player_id="e", player_name="Entity E",
            direction=TradeDirection.BUY, order_kind=OrderKind.LIMIT, shares=2,
            price=100.0, total_amount=200.0, account_book=AccountBook.SEASON,
            timestamp=NOW, limit_order_id="lmt_1",
        )

    @pytest.mark.asyncio
    async def test_inserted(self, db, store: SqlPortfolioStore) -> None:
        row = MagicMock()
        row.id = "trd_1"
        db.execute = AsyncMock(return_value=_result(one=row))
        assert await store.append_trade(self._trade()) == "trd_1"
        params = db.execute.await_args.args[1]
        assert params["direction"] == "buy"
        assert params["order_kind"] == "limit"
        assert params["executed_at"] == NOW

    @pytest.mark.asyncio
    async def test_duplicate_returns_none(self, db, store: SqlPortfolioStore) -> None:
        db.execute = AsyncMock(return_value=_result(one=None))
        assert await store.append_trade(self._trade()) is None


class TestSchemaDrift:
    """Bound parameters must name real columns of the ORM tables."""

    def test_holding_params(self) -> None:
        holding = Holding("e", "Entity E", 1, 10.0, 10.0, NOW)
        params = _holding_params("u1", AccountBook.SEASON, holding)
        assert set(params) <= set(HoldingORM.__table__.columns.keys())

    def test_trade_params(self) -> None:
        params = _trade_params(TestAppendTrade()._trade())
        assert set(params) == set(TradeORM.__table__.columns.keys())

    def test_portfolio_columns(self) -> None:
        assert {"available_balance", "trades_remaining", "last_updated"} <= set(
            PortfolioORM.__table__.columns.keys()
        )
