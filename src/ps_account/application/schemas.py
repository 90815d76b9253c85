"""Wire schemas for portfolios, leaderboards and performance."""

from pydantic import Field

from src.ps_account.domain.models import Holding, Portfolio
from src.ps_common.datetime_utils import to_epoch_ms
from src.ps_common.schemas import CamelModel

# to_camel turns unrealized_pl into "unrealizedPl"; the client expects "PL"


class HoldingSchema(CamelModel):
    player_id: str
    player_name: str
    shares: int
    average_price: float
    current_price: float
    total_value: float
    unrealized_pl: float = Field(alias="unrealizedPL")
    unrealized_pl_percent: float = Field(alias="unrealizedPLPercent")
    purchase_date: int  # epoch ms

    @classmethod
    def from_domain(cls, holding: Holding) -> "HoldingSchema":
        return cls(
            player_id=holding.player_id,
            player_name=holding.player_name,
            shares=holding.shares,
            average_price=round(holding.average_price, 4),
            current_price=holding.current_price,
            total_value=holding.total_value,
            unrealized_pl=holding.unrealized_pl,
            unrealized_pl_percent=holding.unrealized_pl_percent,
            purchase_date=to_epoch_ms(holding.purchase_date),
        )


class PortfolioSchema(CamelModel):
    user_id: str
    total_value: float
    available_balance: float
    todays_pl: float = Field(alias="todaysPL")
    season_pl: float = Field(alias="seasonPL")
    live_pl: float = Field(alias="livePL")
    trades_remaining: int
    season_holdings: list[HoldingSchema]
    live_holdings: list[HoldingSchema]
    last_updated: int  # epoch ms

    @classmethod
    def from_domain(cls, portfolio: Portfolio) -> "PortfolioSchema":
        return cls(
            user_id=portfolio.user_id,
            total_value=portfolio.total_value,
            available_balance=portfolio.available_balance,
            todays_pl=portfolio.todays_pl,
            season_pl=portfolio.season_pl,
            live_pl=portfolio.live_pl,
            trades_remaining=portfolio.trades_remaining,
            season_holdings=[HoldingSchema.from_domain(h) for h in portfolio.season_holdings.values()],
            live_holdings=[HoldingSchema.from_domain(h) for h in portfolio.live_holdings.values()],
            last_updated=to_epoch_ms(portfolio.last_updated),
        )


class LeaderboardEntrySchema(CamelModel):
    rank: int
    user_id: str
    username: str
    portfolio_value: float
    todays_pl: float = Field(alias="todaysPL")
    todays_pl_percent: float = Field(alias="todaysPLPercent")


class BookPerformanceSchema(CamelModel):
    invested: float
    current_value: float
    return_amount: float = Field(alias="return")
    return_percent: float
    holdings_count: int
    trades_remaining: int | None = None


class PortfolioPerformanceSchema(CamelModel):
    user_id: str
    total_invested: float
    total_current_value: float
    total_return: float
    total_return_percent: float
    todays_pl: float = Field(alias="todaysPL")
    season: BookPerformanceSchema
    live: BookPerformanceSchema
