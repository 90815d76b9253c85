from src.ps_account.application.schemas import BookPerformanceSchema, PortfolioPerformanceSchema
from src.ps_account.domain.models import Holding, Portfolio
from src.ps_common.money import round_money


def _invested(holdings: list[Holding]) -> float:
    return sum(h.cost_basis for h in holdings)


def _return_percent(gain: float, invested: float) -> float:
    return round_money(gain / invested * 100) if invested > 0 else 0.0


def _book(holdings: list[Holding], trades_remaining: int | None = None) -> BookPerformanceSchema:
    invested = _invested(holdings)
    value = sum(h.total_value for h in holdings)
    gain = value - invested
    return BookPerformanceSchema(
        invested=round_money(invested),
        current_value=round_money(value),
        return_amount=round_money(gain),
        return_percent=_return_percent(gain, invested),
        holdings_count=len(holdings),
        trades_remaining=trades_remaining,
    )


def compute_performance(portfolio: Portfolio) -> PortfolioPerformanceSchema:
    """Invested vs. current value per book.

    total_return compares total_value (cash included) with the amount invested
    in open positions, so it is only meaningful relative to other users.
    """
    season = list(portfolio.season_holdings.values())
    live = list(portfolio.live_holdings.values())
    invested = _invested(season) + _invested(live)
    total_return = portfolio.total_value - invested
    return PortfolioPerformanceSchema(
        user_id=portfolio.user_id,
        total_invested=round_money(invested),
        total_current_value=portfolio.total_value,
        total_return=round_money(total_return),
        total_return_percent=_return_percent(total_return, invested),
        todays_pl=portfolio.todays_pl,
        season=_book(season),
        live=_book(live, trades_remaining=portfolio.trades_remaining),
    )
