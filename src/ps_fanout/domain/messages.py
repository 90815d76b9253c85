"""Outbound fan-out messages.

Wire shape is {"event": <name>, "data": {...}}: one tagged model per event,
the same event names the client has always listened for.
"""

from typing import Annotated, Literal, Union

from pydantic import Field

from src.ps_account.application.schemas import LeaderboardEntrySchema, PortfolioSchema
from src.ps_common.datetime_utils import to_epoch_ms, utc_now
from src.ps_common.schemas import CamelModel
from src.ps_events.domain.models import FlashMultiplier, GameEvent
from src.ps_market.application.schemas import MarketDataSchema
from src.ps_market.domain.models import PriceChange
from src.ps_trading.application.schemas import MarketImpactSchema, TradeSchema


def _now_ms() -> int:
    return to_epoch_ms(utc_now())


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


class PriceUpdatePayload(CamelModel):
    player_id: str
    price: float
    change: float
    change_percent: float
    timestamp: int = Field(default_factory=_now_ms)

    @classmethod
    def from_domain(cls, change: PriceChange) -> "PriceUpdatePayload":
        return cls(
            player_id=change.player_id,
            price=change.new_price,
            change=change.change,
            change_percent=change.change_percent,
        )


class FlashMultiplierPayload(CamelModel):
    player_id: str
    player_name: str
    multiplier: float
    duration: float
    start_time: int
    event_description: str
    is_active: bool

    @classmethod
    def from_domain(cls, flash: FlashMultiplier) -> "FlashMultiplierPayload":
        return cls(
            player_id=flash.player_id,
            player_name=flash.player_name,
            multiplier=flash.multiplier,
            duration=flash.duration,
            start_time=to_epoch_ms(flash.start_time),
            event_description=flash.event_description,
            is_active=flash.is_active,
        )


class FlashExpiredPayload(CamelModel):
    player_id: str


class GameEventPayload(CamelModel):
    id: str
    timestamp: int
    player_id: str
    player_name: str
    event_type: str
    description: str
    price_impact: float
    quarter: int
    game_time: str
    multiplier: float | None = None

    @classmethod
    def from_domain(cls, event: GameEvent) -> "GameEventPayload":
        return cls(
            id=event.id,
            timestamp=to_epoch_ms(event.timestamp),
            player_id=event.player_id,
            player_name=event.player_name,
            event_type=event.event_type.value,
            description=event.description,
            price_impact=event.price_impact,
            quarter=event.quarter,
            game_time=event.game_time,
            multiplier=event.multiplier,
        )


class TradeExecutedPayload(TradeSchema):
    market_impact: MarketImpactSchema | None = None


class TradeFeedPayload(CamelModel):
    id: str
    username: str
    player_id: str
    player_name: str
    type: str
    shares: int
    price: float
    account_type: str
    timestamp: int
    impact_level: str | None = None


class MarketImpactPayload(CamelModel):
    player_id: str
    player_name: str
    trade_type: str
    shares: int
    price_impact: float
    price_impact_percent: float
    new_price: float
    impact_level: str
    description: str


class LeaderboardPayload(CamelModel):
    type: str
    leaderboard: list[LeaderboardEntrySchema]
    timestamp: int = Field(default_factory=_now_ms)


class UserCountPayload(CamelModel):
    count: int


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class PriceUpdateMessage(CamelModel):
    event: Literal["price_update"] = "price_update"
    data: PriceUpdatePayload


class FlashMultiplierMessage(CamelModel):
    event: Literal["flash_multiplier"] = "flash_multiplier"
    data: FlashMultiplierPayload


class FlashMultiplierExpiredMessage(CamelModel):
    event: Literal["flash_multiplier_expired"] = "flash_multiplier_expired"
    data: FlashExpiredPayload


class GameEventMessage(CamelModel):
    event: Literal["game_event"] = "game_event"
    data: GameEventPayload


class TradeExecutedMessage(CamelModel):
    event: Literal["trade_executed"] = "trade_executed"
    data: TradeExecutedPayload


class TradeFeedMessage(CamelModel):
    event: Literal["trade_feed"] = "trade_feed"
    data: TradeFeedPayload


class MarketImpactMessage(CamelModel):
    event: Literal["market_impact"] = "market_impact"
    data: MarketImpactPayload


class LeaderboardUpdateMessage(CamelModel):
    event: Literal["leaderboard_update"] = "leaderboard_update"
    data: LeaderboardPayload


class PortfolioUpdateMessage(CamelModel):
    event: Literal["portfolio_update"] = "portfolio_update"
    data: PortfolioSchema


class MarketDataMessage(CamelModel):
    event: Literal["market_data"] = "market_data"
    data: MarketDataSchema


class UserCountMessage(CamelModel):
    event: Literal["user_count"] = "user_count"
    data: UserCountPayload


OutboundMessage = Annotated[
    Union[
        PriceUpdateMessage,
        FlashMultiplierMessage,
        FlashMultiplierExpiredMessage,
        GameEventMessage,
        TradeExecutedMessage,
        TradeFeedMessage,
        MarketImpactMessage,
        LeaderboardUpdateMessage,
        PortfolioUpdateMessage,
        MarketDataMessage,
        UserCountMessage,
    ],
    Field(discriminator="event"),
]
