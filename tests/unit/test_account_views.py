"""Tests for leaderboards, performance and the account wire schemas."""

from src.ps_account.application.leaderboard import build_leaderboard
from src.ps_account.application.performance import compute_performance
from src.ps_account.application.schemas import PortfolioSchema
from src.ps_account.domain.ledger import PortfolioLedger
from src.ps_common.enums import AccountBook, LeaderboardKind


def _seed(ledger: PortfolioLedger) -> None:
    rich = ledger.open("rich")
    ledger.apply_buy(rich, AccountBook.SEASON, "e", "Entity E", 5, 100.0)
    live = ledger.open("live")
    ledger.apply_buy(live, AccountBook.LIVE, "f", "Entity F", 4, 50.0)
    ledger.open("idle")
    ledger.sync_prices({"e": 120.0, "f": 60.0})


class TestLeaderboard:
    def test_season_ranks_by_total_value(self, ledger: PortfolioLedger) -> None:
        _seed(ledger)
        entries = build_leaderboard(ledger.list_all(), LeaderboardKind.SEASON, {"rich": "Rich"})
        assert [e.user_id for e in entries] == ["rich", "live", "idle"]
        assert entries[0].username == "Rich"
        assert entries[1].username == "live"
        assert entries[0].portfolio_value == 1100.0
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_live_only_includes_live_holders(self, ledger: PortfolioLedger) -> None:
        _seed(ledger)
        entries = build_leaderboard(ledger.list_all(), LeaderboardKind.LIVE)
        assert [e.user_id for e in entries] == ["live"]
        assert entries[0].todays_pl == 40.0
        assert entries[0].todays_pl_percent == 20.0

    def test_ties_are_broken_by_user_id(self, ledger: PortfolioLedger) -> None:
        for user in ("b", "a", "c"):
            ledger.open(user)
        entries = build_leaderboard(ledger.list_all(), LeaderboardKind.DAILY)
        assert [e.user_id for e in entries] == ["a", "b", "c"]

    def test_limit(self, ledger: PortfolioLedger) -> None:
        _seed(ledger)
        assert len(build_leaderboard(ledger.list_all(), LeaderboardKind.SEASON, limit=1)) == 1

    def test_wire_keys(self, ledger: PortfolioLedger) -> None:
        _seed(ledger)
        wire = build_leaderboard(ledger.list_all(), LeaderboardKind.DAILY)[0].to_wire()
        assert set(wire) == {"rank", "userId", "username", "portfolioValue", "todaysPL", "todaysPLPercent"}


class TestPerformance:
    def test_books(self, ledger: PortfolioLedger) -> None:
        _seed(ledger)
        perf = compute_performance(ledger.require("rich"))
        assert perf.total_invested == 500.0
        assert perf.season.current_value == 600.0
        assert perf.season.return_amount == 100.0
        assert perf.season.return_percent == 20.0
        assert perf.live.holdings_count == 0
        assert perf.live.trades_remaining == 5
        assert perf.to_wire()["season"]["return"] == 100.0

    def test_empty_portfolio(self, ledger: PortfolioLedger) -> None:
        perf = compute_performance(ledger.open("u"))
        assert perf.total_invested == 0.0
        assert perf.total_return_percent == 0.0


class TestPortfolioSchema:
    def test_wire_shape(self, ledger: PortfolioLedger) -> None:
        _seed(ledger)
        wire = PortfolioSchema.from_domain(ledger.require("live")).to_wire()
        assert wire["livePL"] == 40.0
        assert wire["todaysPL"] == 40.0
        holding = wire["liveHoldings"][0]
        assert holding["playerId"] == "f"
        assert holding["unrealizedPL"] == 40.0
        assert holding["unrealizedPLPercent"] == 20.0
        assert isinstance(holding["purchaseDate"], int)
