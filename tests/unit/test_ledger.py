"""Tests for ps_account.domain: Holding, Portfolio and PortfolioLedger."""

import pytest

from src.ps_account.domain.ledger import PortfolioLedger
from src.ps_account.domain.models import Holding, Portfolio
from src.ps_common.enums import AccountBook
from src.ps_common.errors import PortfolioNotFoundError


class TestHolding:
    def test_derived_fields(self) -> None:
        holding = Holding("e", "Entity E", 3, 100.0, 110.0, purchase_date=None)
        assert holding.total_value == 330.0
        assert holding.unrealized_pl == 30.0
        assert holding.unrealized_pl_percent == 10.0

    def test_refresh(self) -> None:
        holding = Holding("e", "Entity E", 3, 100.0, 100.0, purchase_date=None)
        holding.refresh(90.0)
        assert holding.current_price == 90.0
        assert holding.unrealized_pl == -30.0


class TestLedgerLifecycle:
    def test_open_is_idempotent(self, ledger: PortfolioLedger) -> None:
        first = ledger.open("u")
        assert ledger.open("u") is first
        assert first.available_balance == 1000.0
        assert first.trades_remaining == 5
        assert first.total_value == 1000.0

    def test_require(self, ledger: PortfolioLedger) -> None:
        with pytest.raises(PortfolioNotFoundError):
            ledger.require("ghost")
        ledger.open("u")
        assert "u" in ledger
        ledger.close("u")
        assert ledger.get("u") is None

    def test_adopt_recomputes(self, ledger: PortfolioLedger) -> None:
        portfolio = Portfolio("u", 500.0, 2, last_updated=None)
        portfolio.season_holdings["e"] = Holding("e", "Entity E", 5, 100.0, 100.0, purchase_date=None)
        ledger.adopt(portfolio)
        assert ledger.require("u").total_value == 1000.0

    def test_reset_live_session(self, ledger: PortfolioLedger) -> None:
        ledger.open("u").trades_remaining = 0
        assert ledger.reset_live_session("u").trades_remaining == 5


class TestLedgerMutations:
    def test_buy_and_sell_books_are_separate(self, ledger: PortfolioLedger) -> None:
        portfolio = ledger.open("u")
        ledger.apply_buy(portfolio, AccountBook.SEASON, "e", "Entity E", 2, 100.0)
        ledger.apply_buy(portfolio, AccountBook.LIVE, "e", "Entity E", 1, 100.0)
        assert portfolio.season_holdings["e"].shares == 2
        assert portfolio.live_holdings["e"].shares == 1
        assert portfolio.trades_remaining == 4
        assert portfolio.available_balance == 700.0
        assert portfolio.total_value == 1000.0

    def test_sell_all_removes_holding(self, ledger: PortfolioLedger) -> None:
        portfolio = ledger.open("u")
        ledger.apply_buy(portfolio, AccountBook.SEASON, "e", "Entity E", 2, 100.0)
        assert ledger.apply_sell(portfolio, AccountBook.SEASON, "e", 2, 110.0) is None
        assert portfolio.season_holdings == {}
        assert portfolio.available_balance == 1020.0

    def test_live_quota_never_negative(self, ledger: PortfolioLedger) -> None:
        portfolio = ledger.open("u")
        portfolio.trades_remaining = 0
        ledger.apply_buy(portfolio, AccountBook.LIVE, "e", "Entity E", 1, 10.0)
        assert portfolio.trades_remaining == 0


class TestSyncPrices:
    def test_reports_changed_users(self, ledger: PortfolioLedger) -> None:
        holder = ledger.open("holder")
        ledger.open("cash-only")
        ledger.apply_buy(holder, AccountBook.SEASON, "e", "Entity E", 2, 100.0)
        ledger.apply_buy(holder, AccountBook.LIVE, "f", "Entity F", 2, 50.0)

        changed = ledger.sync_prices({"e": 110.0, "f": 45.0})
        assert changed == ["holder"]
        assert holder.season_pl == 20.0
        assert holder.live_pl == -10.0
        assert holder.todays_pl == 10.0
        assert holder.total_value == 1010.0

    def test_unchanged_prices(self, ledger: PortfolioLedger) -> None:
        holder = ledger.open("holder")
        ledger.apply_buy(holder, AccountBook.SEASON, "e", "Entity E", 2, 100.0)
        assert ledger.sync_prices({"e": 100.0}) == []
