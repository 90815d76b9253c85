"""TradeSettlementService — validates and atomically applies buy/sell orders.

execute() is synchronous end to end: there is no await between the first
check and the last ledger write, so a tick can never observe a half-applied
trade. Every rule raises AppError; execute() converts the first failure into a
TradeResult and nothing has been mutated at that point.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from src.ps_account.domain.ledger import PortfolioLedger
from src.ps_account.domain.models import Portfolio
from src.ps_common.datetime_utils import utc_now
from src.ps_common.enums import AccountBook, OrderKind, TradeDirection
from src.ps_common.errors import AppError, InternalError
from src.ps_common.id_generator import generate_id
from src.ps_common.money import round_money
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_pricing.domain.models import MarketImpactResult
from src.ps_pricing.engine.market_impact import calculate_trade_impact
from src.ps_pricing.engine.price_engine import PriceSimulationEngine
from src.ps_trading.domain.models import Trade, TradeResult
from src.ps_trading.domain.trade_log import TradeLog
from src.ps_trading.rules.balance_check import check_balance
from src.ps_trading.rules.order_input import check_shares, parse_account_book, parse_direction
from src.ps_trading.rules.position_check import check_position
from src.ps_trading.rules.trade_cap import check_trade_cap

logger = logging.getLogger(__name__)

TradeObserver = Callable[[Trade, MarketImpactResult | None, Portfolio], None]
MultiplierLookup = Callable[[str], float | None]


class TradeSettlementService:
    def __init__(
        self,
        registry: PlayerRegistry,
        ledger: PortfolioLedger,
        trade_log: TradeLog,
        engine: PriceSimulationEngine | None = None,
        apply_market_impact: bool = True,
        multiplier_lookup: MultiplierLookup | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._trade_log = trade_log
        self._engine = engine
        self._apply_market_impact = apply_market_impact
        self._multiplier_lookup = multiplier_lookup
        self._clock = clock
        self._observers: list[TradeObserver] = []

    def on_executed(self, observer: TradeObserver) -> None:
        self._observers.append(observer)

    def execute(
        self,
        user_id: str,
        player_id: str,
        shares: object,
        direction: object,
        account_book: object = AccountBook.SEASON,
        order_kind: OrderKind = OrderKind.MARKET,
        limit_order_id: str | None = None,
    ) -> TradeResult:
        try:
            trade, impact, portfolio = self._settle(
                user_id, player_id, shares, direction, account_book, order_kind, limit_order_id
            )
        except AppError as e:
            logger.info(
                "Trade rejected user=%s player=%s code=%s: %s",
                user_id, player_id, e.code, e.message,
            )
            return TradeResult.fail(e)
        except Exception:
            logger.exception("Unexpected settlement failure user=%s player=%s", user_id, player_id)
            return TradeResult.fail(InternalError("Trade execution failed"))

        if impact is not None and self._engine is not None and impact.new_price != trade.price:
            self._engine.set_price(
                trade.player_id, impact.new_price, f"{trade.direction.value} {trade.shares} shares"
            )

        for observer in self._observers:
            try:
                observer(trade, impact, portfolio)
            except Exception:
                logger.exception("Trade observer failed for trade %s", trade.id)

        return TradeResult.ok(trade, impact)

    def _settle(
        self,
        user_id: str,
        player_id: str,
        shares: object,
        direction: object,
        account_book: object,
        order_kind: OrderKind,
        limit_order_id: str | None,
    ) -> tuple[Trade, MarketImpactResult | None, Portfolio]:
        # 0. input
        qty = check_shares(shares)
        side = parse_direction(direction)
        book = parse_account_book(account_book)

        # 1. existence
        portfolio = self._ledger.require(user_id)
        player = self._registry.require(player_id)
        price = player.current_price

        # 2-4. rules
        check_trade_cap(portfolio, book)
        if side is TradeDirection.BUY:
            check_balance(portfolio, qty, price)
        else:
            check_position(portfolio, book, player_id, qty)

        impact = (
            calculate_trade_impact(player.volatility, side, qty, price)
            if self._apply_market_impact
            else None
        )

        multiplier = None
        if book is AccountBook.LIVE and self._multiplier_lookup is not None:
            multiplier = self._multiplier_lookup(player.id)

        # Effects: nothing below may raise on a validated order
        if side is TradeDirection.BUY:
            self._ledger.apply_buy(portfolio, book, player.id, player.name, qty, price)
        else:
            self._ledger.apply_sell(portfolio, book, player.id, qty, price)

        trade = Trade(
            id=generate_id("trd_"),
            user_id=user_id,
            player_id=player.id,
            player_name=player.name,
            direction=side,
            order_kind=order_kind,
            shares=qty,
            price=price,
            total_amount=round_money(qty * price),
            account_book=book,
            timestamp=self._clock(),
            multiplier=multiplier,
            limit_order_id=limit_order_id,
        )
        self._trade_log.append(trade)
        logger.info(
            "Trade %s: %s %s %d %s @ %.2f (%s)",
            trade.id, user_id, side.value, qty, player.id, price, book.value,
        )
        return trade, impact, portfolio
