"""Trade / LimitOrder domain models: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime

from src.ps_common.enums import (
    AccountBook,
    LimitOrderStatus,
    OrderKind,
    TradeDirection,
    TradeStatus,
)
from src.ps_common.errors import AppError
from src.ps_pricing.domain.models import MarketImpactResult


@dataclass(frozen=True)
class Trade:
    """Immutable execution record."""

    id: str
    user_id: str
    player_id: str
    player_name: str
    direction: TradeDirection
    order_kind: OrderKind
    shares: int
    price: float
    total_amount: float
    account_book: AccountBook
    timestamp: datetime
    status: TradeStatus = TradeStatus.EXECUTED
    multiplier: float | None = None
    limit_order_id: str | None = None


@dataclass
class TradeResult:
    """Outcome of a settlement attempt. Failures carry the typed error, never raise."""

    success: bool
    trade: Trade | None = None
    error: AppError | None = None
    impact: MarketImpactResult | None = None

    @classmethod
    def ok(cls, trade: Trade, impact: MarketImpactResult | None = None) -> "TradeResult":
        return cls(success=True, trade=trade, impact=impact)

    @classmethod
    def fail(cls, error: AppError) -> "TradeResult":
        return cls(success=False, error=error)

    @property
    def error_code(self) -> int | None:
        return self.error.code if self.error else None


@dataclass
class LimitOrder:
    id: str
    user_id: str
    player_id: str
    direction: TradeDirection
    shares: int
    limit_price: float
    account_book: AccountBook
    created_at: datetime
    expires_at: datetime
    status: LimitOrderStatus = LimitOrderStatus.PENDING
    closed_at: datetime | None = None
    cancel_reason: str | None = None
    trade_id: str | None = None
    attempts: int = 0

    @property
    def is_pending(self) -> bool:
        return self.status is LimitOrderStatus.PENDING

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_triggered(self, price: float) -> bool:
        if self.direction is TradeDirection.BUY:
            return price <= self.limit_price
        return price >= self.limit_price
