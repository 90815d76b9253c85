"""MarketRuntime — composition root.

Owns exactly one instance of every engine, wires the observers between them,
and is the only entry point the transport layer talks to. Nothing here is a
module-level global: src.main builds one MarketRuntime per app.

Wiring:
  price engine cycle   -> portfolio re-sync, limit-order evaluation
  price engine update  -> broadcaster.price_update
  settlement executed  -> broadcaster.trade_executed (+ persistence for limit fills)
  game event           -> broadcaster.game_event
  flash activated/expired -> broadcaster.flash_*
"""

import asyncio
import logging
import random
from collections import defaultdict
from collections.abc import Iterable

from config.settings import Settings
from src.ps_account.application.leaderboard import build_leaderboard
from src.ps_account.application.performance import compute_performance
from src.ps_account.application.schemas import LeaderboardEntrySchema, PortfolioPerformanceSchema
from src.ps_account.domain.ledger import PortfolioLedger
from src.ps_account.domain.models import Portfolio
from src.ps_account.domain.repository import PortfolioStoreProtocol
from src.ps_common.enums import AccountBook, LeaderboardKind, LimitOrderStatus, OrderKind, TradeDirection
from src.ps_common.errors import AppError
from src.ps_events.domain.models import FlashMultiplier
from src.ps_events.engine.flash_board import FlashBoard
from src.ps_events.engine.game_events import GameEventGenerator
from src.ps_fanout.application.broadcaster import MarketBroadcaster
from src.ps_fanout.engine.hub import FanoutHub, Identity, IdentityResolver
from src.ps_market.application.market_data import build_market_snapshot
from src.ps_market.application.schemas import MarketDataSchema
from src.ps_market.domain.models import Player
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_market.infrastructure.roster import load_roster
from src.ps_pricing.domain.models import MarketImpactResult
from src.ps_pricing.engine.price_engine import PriceSimulationEngine
from src.ps_trading.domain.models import LimitOrder, Trade, TradeResult
from src.ps_trading.domain.trade_log import TradeLog, TradePage, TradeVolume
from src.ps_trading.engine.limit_orders import LimitOrderWatcher
from src.ps_trading.engine.settlement import TradeSettlementService

logger = logging.getLogger(__name__)


class MarketRuntime:
    def __init__(
        self,
        settings: Settings,
        players: Iterable[Player] | None = None,
        store: PortfolioStoreProtocol | None = None,
        resolver: IdentityResolver | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._rng = rng or random.Random()
        self._user_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._usernames: dict[str, str] = {}
        self._background: set[asyncio.Task[None]] = set()

        self.registry = PlayerRegistry(
            players if players is not None else load_roster(self._rng), rng=self._rng
        )
        self.ledger = PortfolioLedger(
            starting_balance=settings.STARTING_BALANCE,
            live_trades_per_session=settings.LIVE_TRADES_PER_SESSION,
        )
        self.trade_log = TradeLog()
        self.flash_board = FlashBoard(
            duration_seconds=settings.FLASH_MULTIPLIER_SECONDS,
            sweep_seconds=settings.FLASH_SWEEP_SECONDS,
        )
        self.engine = PriceSimulationEngine(
            self.registry,
            rng=self._rng,
            interval_seconds=settings.PRICE_TICK_SECONDS,
            volatility_boost=self.flash_board.volatility_factor,
        )
        self.settlement = TradeSettlementService(
            self.registry,
            self.ledger,
            self.trade_log,
            engine=self.engine,
            apply_market_impact=settings.APPLY_MARKET_IMPACT,
            multiplier_lookup=self.flash_board.multiplier_for,
        )
        self.limit_orders = LimitOrderWatcher(
            self.registry, self.settlement, ttl_hours=settings.LIMIT_ORDER_TTL_HOURS
        )
        self.game_events = GameEventGenerator(
            self.registry,
            self.engine,
            self.flash_board,
            rng=self._rng,
            interval_seconds=settings.GAME_EVENT_TICK_SECONDS,
            random_event_probability=settings.RANDOM_EVENT_PROBABILITY,
        )
        self.hub = FanoutHub(resolver=resolver, queue_size=settings.SUBSCRIBER_QUEUE_SIZE)
        self.broadcaster = MarketBroadcaster(
            self.hub,
            self.registry,
            self.ledger,
            rng=self._rng,
            market_data_seconds=settings.MARKET_DATA_TICK_SECONDS,
        )
        self._wire()

    def _wire(self) -> None:
        self.engine.on_cycle(self._sync_portfolios)
        self.engine.on_cycle(self.limit_orders.evaluate)
        self.engine.on_price_update(self.broadcaster.price_update)
        self.settlement.on_executed(self.broadcaster.trade_executed)
        self.settlement.on_executed(self._persist_limit_fill)
        self.game_events.on_event(self.broadcaster.game_event)
        self.flash_board.on_activated(self.broadcaster.flash_activated)
        self.flash_board.on_expired(self.broadcaster.flash_expired)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        self.engine.start()
        self.game_events.start()
        self.flash_board.start()
        self.broadcaster.start()
        logger.info("Market runtime started with %d players", len(self.registry))

    async def stop(self) -> None:
        self.broadcaster.stop()
        self.flash_board.stop()
        self.game_events.stop()
        self.engine.stop()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        logger.info("Market runtime stopped")

    @property
    def is_running(self) -> bool:
        return self.engine.is_running

    # ------------------------------------------------------------------
    # Cycle hooks / observers
    # ------------------------------------------------------------------

    def _sync_portfolios(self) -> None:
        changed = self.ledger.sync_prices(self.registry.prices())
        for user_id in changed:
            portfolio = self.ledger.get(user_id)
            if portfolio is not None:
                self.broadcaster.portfolio_update(portfolio)

    def _persist_limit_fill(
        self, trade: Trade, impact: MarketImpactResult | None, portfolio: Portfolio
    ) -> None:
        # Market orders are persisted inline by execute_trade
        if self._store is None or trade.order_kind is not OrderKind.LIMIT:
            return
        try:
            task = asyncio.get_running_loop().create_task(self._persist(trade, portfolio))
        except RuntimeError:
            logger.warning("No event loop, limit fill %s not persisted", trade.id)
            return
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _persist(self, trade: Trade, portfolio: Portfolio) -> None:
        if self._store is None:
            return
        try:
            await self._store.append_trade(trade)
            await self._store.save_portfolio(portfolio)
        except AppError as e:
            logger.warning("Persisting trade %s failed: %s", trade.id, e.message)
        except Exception:
            logger.exception("Unexpected persistence failure for trade %s", trade.id)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def remember(self, identity: Identity) -> None:
        if not identity.is_guest:
            self._usernames[identity.user_id] = identity.username

    def usernames(self) -> dict[str, str]:
        return {**self._usernames, **self.hub.usernames()}

    # ------------------------------------------------------------------
    # Portfolios
    # ------------------------------------------------------------------

    async def get_portfolio(self, user_id: str) -> Portfolio:
        """Return the user's portfolio, loading it from the store or opening a fresh one."""
        portfolio = self.ledger.get(user_id)
        if portfolio is not None:
            return portfolio

        if self._store is not None:
            try:
                loaded = await self._store.load_portfolio(user_id)
            except AppError as e:
                logger.warning("Loading portfolio for %s failed: %s", user_id, e.message)
                loaded = None
            # Another request may have opened it while we awaited
            existing = self.ledger.get(user_id)
            if existing is not None:
                return existing
            if loaded is not None:
                loaded.trades_remaining = min(
                    loaded.trades_remaining, self._settings.LIVE_TRADES_PER_SESSION
                )
                self.ledger.adopt(loaded)
                self.ledger.sync_prices(self.registry.prices())
                return loaded

        return self.ledger.open(user_id)

    async def get_portfolio_performance(self, user_id: str) -> PortfolioPerformanceSchema:
        return compute_performance(await self.get_portfolio(user_id))

    def get_leaderboard(
        self, kind: LeaderboardKind, limit: int | None = None
    ) -> list[LeaderboardEntrySchema]:
        return build_leaderboard(self.ledger.list_all(), kind, usernames=self.usernames(), limit=limit)

    def start_live_session(self) -> int:
        """Replay the scripted game and give every portfolio a fresh live trade quota."""
        self.game_events.reset_script()
        for portfolio in self.ledger.list_all():
            self.ledger.reset_live_session(portfolio.user_id)
        logger.info("Live session restarted for %d portfolios", len(self.ledger.list_all()))
        return len(self.ledger.list_all())

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    async def execute_trade(
        self,
        user_id: str,
        player_id: str,
        shares: object,
        direction: TradeDirection | str,
        account_book: AccountBook | str = AccountBook.SEASON,
    ) -> TradeResult:
        async with self._user_locks[user_id]:
            portfolio = await self.get_portfolio(user_id)
            result = self.settlement.execute(user_id, player_id, shares, direction, account_book)
            if result.success and result.trade is not None:
                await self._persist(result.trade, portfolio)
            return result

    async def place_limit_order(
        self,
        user_id: str,
        player_id: str,
        direction: TradeDirection | str,
        shares: object,
        limit_price: object,
        account_book: AccountBook | str = AccountBook.SEASON,
    ) -> LimitOrder:
        await self.get_portfolio(user_id)
        return self.limit_orders.place(
            user_id, player_id, direction, shares, limit_price, account_book
        )

    def cancel_limit_order(self, user_id: str, order_id: str) -> LimitOrder:
        return self.limit_orders.cancel(order_id, user_id)

    def list_limit_orders(
        self, user_id: str, status: LimitOrderStatus | None = None
    ) -> list[LimitOrder]:
        return self.limit_orders.list_for_user(user_id, status)

    def get_trade_history(
        self,
        user_id: str,
        account_book: AccountBook | None = None,
        direction: TradeDirection | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> TradePage:
        return self.trade_log.for_user(user_id, account_book, direction, page, limit)

    def get_recent_trades(self, limit: int = 10) -> list[Trade]:
        return self.trade_log.recent(limit)

    def get_trade_volume(self, player_id: str, window: str = "24h") -> TradeVolume:
        self.registry.require(player_id)
        return self.trade_log.volume(player_id, window)

    # ------------------------------------------------------------------
    # Market
    # ------------------------------------------------------------------

    def get_players(self, active_only: bool = False) -> list[Player]:
        return self.registry.list_active() if active_only else self.registry.list_all()

    def get_player(self, player_id: str) -> Player:
        return self.registry.require(player_id)

    def get_active_flash_multipliers(self) -> list[FlashMultiplier]:
        return self.flash_board.active()

    def trigger_shock(self, player_id: str, multiplier: float, reason: str = "manual shock") -> bool:
        """Returns False for an unknown player."""
        return self.engine.apply_shock(player_id, multiplier, reason)

    def market_snapshot(self) -> MarketDataSchema:
        return build_market_snapshot(self.registry, self._rng, active_traders=self.hub.presence_count)
