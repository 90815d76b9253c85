"""LimitOrderWatcher — resting conditional orders, evaluated once per price cycle.

A triggered order is forwarded to TradeSettlementService with its stored
parameters. It becomes executed only when settlement succeeds; otherwise it
stays pending and is retried on the next cycle until it expires.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from src.ps_common.datetime_utils import utc_now
from src.ps_common.enums import LimitOrderStatus, OrderKind
from src.ps_common.errors import (
    InvalidInputError,
    LimitOrderNotFoundError,
    OrderNotCancellableError,
)
from src.ps_common.id_generator import generate_id
from src.ps_common.money import round_money
from src.ps_market.domain.registry import PlayerRegistry
from src.ps_trading.domain.models import LimitOrder, TradeResult
from src.ps_trading.engine.settlement import TradeSettlementService
from src.ps_trading.rules.order_input import (
    check_limit_price,
    check_shares,
    parse_account_book,
    parse_direction,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 24
TERMINAL_RETENTION = timedelta(days=7)
MAX_ORDERS = 100


class LimitOrderWatcher:
    def __init__(
        self,
        registry: PlayerRegistry,
        settlement: TradeSettlementService,
        ttl_hours: float = DEFAULT_TTL_HOURS,
        max_orders: int = MAX_ORDERS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._registry = registry
        self._settlement = settlement
        self._ttl = timedelta(hours=ttl_hours)
        self._max_orders = max_orders
        self._clock = clock
        # insertion order == creation order
        self._orders: dict[str, LimitOrder] = {}
        self._evaluating = False

    def place(
        self,
        user_id: str,
        player_id: str,
        direction: object,
        shares: object,
        limit_price: object,
        account_book: object,
    ) -> LimitOrder:
        qty = check_shares(shares)
        side = parse_direction(direction)
        book = parse_account_book(account_book)
        price = round_money(check_limit_price(limit_price))
        self._registry.require(player_id)

        self.prune()
        if self._pending_count(user_id) >= self._max_orders:
            raise InvalidInputError(f"too many resting limit orders (max {self._max_orders})")

        now = self._clock()
        order = LimitOrder(
            id=generate_id("lmt_"),
            user_id=user_id,
            player_id=player_id,
            direction=side,
            shares=qty,
            limit_price=price,
            account_book=book,
            created_at=now,
            expires_at=now + self._ttl,
        )
        self._orders[order.id] = order
        self._enforce_cap()
        logger.info(
            "Limit order %s placed: %s %s %d %s @ %.2f",
            order.id, user_id, side.value, qty, player_id, price,
        )
        return order

    def cancel(self, order_id: str, user_id: str) -> LimitOrder:
        order = self._orders.get(order_id)
        if order is None or order.user_id != user_id:
            raise LimitOrderNotFoundError(order_id)
        if not order.is_pending:
            raise OrderNotCancellableError(order_id, order.status.value)
        self._close(order, LimitOrderStatus.CANCELLED, self._clock(), reason="user")
        return order

    def get(self, order_id: str) -> LimitOrder | None:
        return self._orders.get(order_id)

    def list_for_user(
        self, user_id: str, status: LimitOrderStatus | None = None
    ) -> list[LimitOrder]:
        """Newest first."""
        return [
            o for o in reversed(self._orders.values())
            if o.user_id == user_id and (status is None or o.status is status)
        ]

    def pending(self) -> list[LimitOrder]:
        return [o for o in self._orders.values() if o.is_pending]

    # ------------------------------------------------------------------
    # Per-cycle evaluation
    # ------------------------------------------------------------------

    def evaluate(self, now: datetime | None = None) -> list[TradeResult]:
        """Expire stale orders, fire triggered ones. Returns the successful fills."""
        if self._evaluating:
            # A fill moved the price and re-entered via the cycle hook
            return []
        self._evaluating = True
        try:
            return self._evaluate(now or self._clock())
        finally:
            self._evaluating = False

    def _evaluate(self, now: datetime) -> list[TradeResult]:
        fills: list[TradeResult] = []
        for order in self.pending():
            if not order.is_pending:
                continue
            if order.is_expired(now):
                self._close(order, LimitOrderStatus.CANCELLED, now, reason="expired")
                continue

            player = self._registry.get(order.player_id)
            if player is None or not order.is_triggered(player.current_price):
                continue

            order.attempts += 1
            result = self._settlement.execute(
                user_id=order.user_id,
                player_id=order.player_id,
                shares=order.shares,
                direction=order.direction,
                account_book=order.account_book,
                order_kind=OrderKind.LIMIT,
                limit_order_id=order.id,
            )
            if result.success and result.trade is not None:
                order.trade_id = result.trade.id
                self._close(order, LimitOrderStatus.EXECUTED, now)
                fills.append(result)
            else:
                logger.info(
                    "Limit order %s triggered but not filled (attempt %d, code=%s)",
                    order.id, order.attempts, result.error_code,
                )

        self.prune(now)
        return fills

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def prune(self, now: datetime | None = None) -> int:
        cutoff = (now or self._clock()) - TERMINAL_RETENTION
        stale = [
            oid for oid, o in self._orders.items()
            if not o.is_pending and o.closed_at is not None and o.closed_at < cutoff
        ]
        for oid in stale:
            del self._orders[oid]
        return len(stale) + self._enforce_cap()

    def _enforce_cap(self) -> int:
        """Drop the oldest terminal orders beyond max_orders. Pending orders are never dropped."""
        excess = len(self._orders) - self._max_orders
        if excess <= 0:
            return 0
        victims = [oid for oid, o in self._orders.items() if not o.is_pending][:excess]
        for oid in victims:
            del self._orders[oid]
        return len(victims)

    def _pending_count(self, user_id: str) -> int:
        return sum(1 for o in self._orders.values() if o.is_pending and o.user_id == user_id)

    def _close(
        self,
        order: LimitOrder,
        status: LimitOrderStatus,
        now: datetime,
        reason: str | None = None,
    ) -> None:
        order.status = status
        order.closed_at = now
        order.cancel_reason = reason
        logger.info("Limit order %s %s%s", order.id, status.value, f" ({reason})" if reason else "")
