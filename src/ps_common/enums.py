"""Global enums — values are the wire strings the mobile client sends and expects."""

from enum import Enum


class TradeDirection(str, Enum):
    BUY = "buy"
    SELL = "sell"


class AccountBook(str, Enum):
    """Segregated holding book: long-horizon season or session-capped live."""
    SEASON = "season"
    LIVE = "live"


class OrderKind(str, Enum):
    MARKET = "market"
    LIMIT = "limit"


class TradeStatus(str, Enum):
    EXECUTED = "executed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class LimitOrderStatus(str, Enum):
    PENDING = "pending"
    EXECUTED = "executed"
    CANCELLED = "cancelled"


class ImpactLevel(str, Enum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    MAJOR = "major"


class GameEventType(str, Enum):
    BASKET = "basket"
    THREE_POINTER = "three_pointer"
    ASSIST = "assist"
    REBOUND = "rebound"
    STEAL = "steal"
    BLOCK = "block"
    DUNK = "dunk"


class LeaderboardKind(str, Enum):
    SEASON = "season"
    LIVE = "live"
    DAILY = "daily"
