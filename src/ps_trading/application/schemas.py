"""Request / response schemas for trades and limit orders."""

from pydantic import Field

from src.ps_common.datetime_utils import to_epoch_ms
from src.ps_common.enums import AccountBook, TradeDirection
from src.ps_common.schemas import CamelModel
from src.ps_pricing.domain.models import MarketImpactResult
from src.ps_trading.domain.models import LimitOrder, Trade
from src.ps_trading.domain.trade_log import TradePage, TradeVolume

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TradeRequest(CamelModel):
    player_id: str
    shares: int = Field(..., gt=0)
    direction: TradeDirection = Field(..., alias="type")
    account_book: AccountBook = Field(AccountBook.SEASON, alias="accountType")


class LimitOrderRequest(TradeRequest):
    limit_price: float = Field(..., gt=0)


class ShockRequest(CamelModel):
    multiplier: float = Field(..., gt=0)
    reason: str = "manual shock"


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TradeSchema(CamelModel):
    id: str
    user_id: str
    player_id: str
    player_name: str
    type: TradeDirection
    order_type: str
    shares: int
    price: float
    total_amount: float
    account_type: AccountBook
    status: str
    timestamp: int  # epoch ms
    multiplier: float | None = None
    limit_order_id: str | None = None

    @classmethod
    def from_domain(cls, trade: Trade) -> "TradeSchema":
        return cls(
            id=trade.id,
            user_id=trade.user_id,
            player_id=trade.player_id,
            player_name=trade.player_name,
            type=trade.direction,
            order_type=trade.order_kind.value,
            shares=trade.shares,
            price=trade.price,
            total_amount=trade.total_amount,
            account_type=trade.account_book,
            status=trade.status.value,
            timestamp=to_epoch_ms(trade.timestamp),
            multiplier=trade.multiplier,
            limit_order_id=trade.limit_order_id,
        )


class MarketImpactSchema(CamelModel):
    price_impact: float
    price_impact_percent: float
    new_price: float
    impact_level: str
    broadcast_required: bool

    @classmethod
    def from_domain(cls, impact: MarketImpactResult) -> "MarketImpactSchema":
        return cls(
            price_impact=impact.price_impact,
            price_impact_percent=impact.price_impact_percent,
            new_price=impact.new_price,
            impact_level=impact.impact_level.value,
            broadcast_required=impact.broadcast_required,
        )


class TradeExecutionSchema(CamelModel):
    trade: TradeSchema
    market_impact: MarketImpactSchema | None = None


class LimitOrderSchema(CamelModel):
    id: str
    user_id: str
    player_id: str
    type: TradeDirection
    shares: int
    limit_price: float
    account_type: AccountBook
    status: str
    created_at: int
    expires_at: int
    closed_at: int | None = None
    cancel_reason: str | None = None
    trade_id: str | None = None

    @classmethod
    def from_domain(cls, order: LimitOrder) -> "LimitOrderSchema":
        return cls(
            id=order.id,
            user_id=order.user_id,
            player_id=order.player_id,
            type=order.direction,
            shares=order.shares,
            limit_price=order.limit_price,
            account_type=order.account_book,
            status=order.status.value,
            created_at=to_epoch_ms(order.created_at),
            expires_at=to_epoch_ms(order.expires_at),
            closed_at=to_epoch_ms(order.closed_at) if order.closed_at else None,
            cancel_reason=order.cancel_reason,
            trade_id=order.trade_id,
        )


class TradePageSchema(CamelModel):
    trades: list[TradeSchema]
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_domain(cls, page: TradePage) -> "TradePageSchema":
        return cls(
            trades=[TradeSchema.from_domain(t) for t in page.trades],
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
        )


class TradeVolumeSchema(CamelModel):
    player_id: str
    timeframe: str
    total_volume: float
    total_shares: int
    buy_volume: float
    sell_volume: float
    trade_count: int
    average_trade_size: float

    @classmethod
    def from_domain(cls, volume: TradeVolume) -> "TradeVolumeSchema":
        return cls(
            player_id=volume.player_id,
            timeframe=volume.window,
            total_volume=volume.total_volume,
            total_shares=volume.total_shares,
            buy_volume=volume.buy_volume,
            sell_volume=volume.sell_volume,
            trade_count=volume.trade_count,
            average_trade_size=volume.average_trade_size,
        )
