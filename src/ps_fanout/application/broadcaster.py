"""MarketBroadcaster: turns engine callbacks into routed fan-out messages.

Routing:
  price_update                    -> general + player:{id}
  flash_multiplier, game_event    -> general + live-session
  trade_executed                  -> user:{id}
  trade_feed, market_impact,
  market_data, flash_multiplier_expired -> general
  portfolio_update                -> portfolio:{id} + user:{id}
  leaderboard_update              -> leaderboard:{kind}
"""

import logging
import random

from src.ps_account.application.leaderboard import build_leaderboard
from src.ps_account.application.schemas import PortfolioSchema
from src.ps_account.domain.ledger import PortfolioLedger
from src.ps_account.domain.models import Portfolio
from src.ps_common.datetime_utils import to_epoch_ms
from src.ps_common.enums import LeaderboardKind
from src.ps_events.domain.models import FlashMultiplier, GameEvent
from src.ps_fanout.domain import topics
from src.ps_fanout.domain.messages import (
    FlashExpiredPayload,
    FlashMultiplierExpiredMessage,
    FlashMultiplierMessage,
    FlashMultiplierPayload,
    GameEventMessage,
    GameEventPayload,
    LeaderboardPayload,
    LeaderboardUpdateMessage,
    MarketDataMessage,
    MarketImpactMessage,
    MarketImpactPayload,
    PortfolioUpdateMessage,
    PriceUpdateMessage,
    PriceUpdatePayload,
    TradeExecutedMessage,
    TradeExecutedPayload,
    TradeFeedMessage,
    TradeFeedPayload,
)
from src.ps_fanout.engine.hub import FanoutHub
from src.ps_market.application.market_data import build_market_snapshot
from src.ps_market.domain.models import PriceChange
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_pricing.domain.models import MarketImpactResult
from src.ps_pricing.engine.market_impact import impact_description
from src.ps_pricing.engine.ticker import PeriodicTask
from src.ps_trading.application.schemas import MarketImpactSchema, TradeSchema
from src.ps_trading.domain.models import Trade

logger = logging.getLogger(__name__)

BROADCAST_LEADERBOARDS = (LeaderboardKind.SEASON, LeaderboardKind.LIVE)


class MarketBroadcaster:
    def __init__(
        self,
        hub: FanoutHub,
        registry: PlayerRegistry,
        ledger: PortfolioLedger,
        rng: random.Random | None = None,
        market_data_seconds: float = 45.0,
    ) -> None:
        self._hub = hub
        self._registry = registry
        self._ledger = ledger
        self._rng = rng or random.Random()
        self._task = PeriodicTask("market-data", market_data_seconds, self.publish_market_overview)

    def start(self) -> bool:
        return self._task.start()

    def stop(self) -> bool:
        return self._task.stop()

    # ------------------------------------------------------------------
    # Engine observers
    # ------------------------------------------------------------------

    def price_update(self, player_id: str, new_price: float, change: PriceChange) -> int:
        return self._hub.publish_multi(
            (topics.GENERAL, topics.player_topic(player_id)),
            PriceUpdateMessage(data=PriceUpdatePayload.from_domain(change)),
        )

    def flash_activated(self, flash: FlashMultiplier) -> int:
        logger.info("Flash multiplier broadcast: %s %.1fx", flash.player_name, flash.multiplier)
        return self._hub.publish_multi(
            (topics.GENERAL, topics.LIVE_SESSION),
            FlashMultiplierMessage(data=FlashMultiplierPayload.from_domain(flash)),
        )

    def flash_expired(self, flash: FlashMultiplier) -> int:
        return self._hub.publish(
            topics.GENERAL,
            FlashMultiplierExpiredMessage(data=FlashExpiredPayload(player_id=flash.player_id)),
        )

    def game_event(self, event: GameEvent) -> int:
        return self._hub.publish_multi(
            (topics.GENERAL, topics.LIVE_SESSION),
            GameEventMessage(data=GameEventPayload.from_domain(event)),
        )

    def trade_executed(
        self, trade: Trade, impact: MarketImpactResult | None, portfolio: Portfolio
    ) -> None:
        impact_schema = MarketImpactSchema.from_domain(impact) if impact else None
        executed = TradeExecutedPayload(
            **TradeSchema.from_domain(trade).model_dump(), market_impact=impact_schema
        )
        self._hub.publish(topics.user_topic(trade.user_id), TradeExecutedMessage(data=executed))

        self._hub.publish(
            topics.GENERAL,
            TradeFeedMessage(
                data=TradeFeedPayload(
                    id=trade.id,
                    username=self._hub.usernames().get(trade.user_id, "Anonymous"),
                    player_id=trade.player_id,
                    player_name=trade.player_name,
                    type=trade.direction.value,
                    shares=trade.shares,
                    price=trade.price,
                    account_type=trade.account_book.value,
                    timestamp=to_epoch_ms(trade.timestamp),
                    impact_level=impact.impact_level.value if impact else None,
                )
            ),
        )

        if impact is not None and impact.moves_market:
            self._hub.publish(
                topics.GENERAL,
                MarketImpactMessage(
                    data=MarketImpactPayload(
                        player_id=trade.player_id,
                        player_name=trade.player_name,
                        trade_type=trade.direction.value,
                        shares=trade.shares,
                        price_impact=impact.price_impact,
                        price_impact_percent=impact.price_impact_percent,
                        new_price=impact.new_price,
                        impact_level=impact.impact_level.value,
                        description=impact_description(
                            impact.impact_level, trade.shares, trade.player_name
                        ),
                    )
                ),
            )

        self.portfolio_update(portfolio)

    def portfolio_update(self, portfolio: Portfolio) -> int:
        return self._hub.publish_multi(
            (topics.portfolio_topic(portfolio.user_id), topics.user_topic(portfolio.user_id)),
            PortfolioUpdateMessage(data=PortfolioSchema.from_domain(portfolio)),
        )

    # ------------------------------------------------------------------
    # Periodic overview
    # ------------------------------------------------------------------

    def leaderboard_update(self, kind: LeaderboardKind) -> int:
        entries = build_leaderboard(self._ledger.list_all(), kind, usernames=self._hub.usernames())
        return self._hub.publish(
            topics.leaderboard_topic(kind),
            LeaderboardUpdateMessage(data=LeaderboardPayload(type=kind.value, leaderboard=entries)),
        )

    def market_data(self) -> int:
        snapshot = build_market_snapshot(
            self._registry, self._rng, active_traders=self._hub.presence_count
        )
        return self._hub.publish(topics.GENERAL, MarketDataMessage(data=snapshot))

    def publish_market_overview(self) -> None:
        self.market_data()
        for kind in BROADCAST_LEADERBOARDS:
            self.leaderboard_update(kind)
