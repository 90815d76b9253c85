"""SqlPortfolioStore — concrete implementation of PortfolioStoreProtocol.

The in-memory ledger is the source of truth while the process runs; this
store only snapshots it. save_portfolio rewrites the user's portfolio row and
holdings in one transaction. Driver / connection failures surface as
TransientBackendError; the runtime logs them and carries on in memory.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ps_account.domain.models import Holding, Portfolio
from src.ps_common.enums import AccountBook
from src.ps_common.errors import TransientBackendError
from src.ps_trading.domain.models import Trade

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_PORTFOLIO_SQL = text("""
    SELECT user_id, available_balance, trades_remaining, last_updated
    FROM portfolios WHERE user_id = :user_id
""")

_GET_HOLDINGS_SQL = text("""
    SELECT account_book, player_id, player_name, shares,
           average_price, current_price, purchase_date
    FROM holdings WHERE user_id = :user_id
    ORDER BY id
""")

_UPSERT_PORTFOLIO_SQL = text("""
    INSERT INTO portfolios
        (user_id, available_balance, trades_remaining, total_value,
         season_pl, live_pl, todays_pl, last_updated)
    VALUES
        (:user_id, :available_balance, :trades_remaining, :total_value,
         :season_pl, :live_pl, :todays_pl, :last_updated)
    ON CONFLICT (user_id) DO UPDATE SET
        available_balance = EXCLUDED.available_balance,
        trades_remaining  = EXCLUDED.trades_remaining,
        total_value       = EXCLUDED.total_value,
        season_pl         = EXCLUDED.season_pl,
        live_pl           = EXCLUDED.live_pl,
        todays_pl         = EXCLUDED.todays_pl,
        last_updated      = EXCLUDED.last_updated,
        updated_at        = NOW()
""")

_DELETE_HOLDINGS_SQL = text("DELETE FROM holdings WHERE user_id = :user_id")

_INSERT_HOLDING_SQL = text("""
    INSERT INTO holdings
        (user_id, account_book, player_id, player_name, shares,
         average_price, current_price, purchase_date)
    VALUES
        (:user_id, :account_book, :player_id, :player_name, :shares,
         :average_price, :current_price, :purchase_date)
""")

_INSERT_TRADE_SQL = text("""
    INSERT INTO trades
        (id, user_id, player_id, player_name, direction, order_kind, shares,
         price, total_amount, account_book, status, multiplier,
         limit_order_id, executed_at)
    VALUES
        (:id, :user_id, :player_id, :player_name, :direction, :order_kind, :shares,
         :price, :total_amount, :account_book, :status, :multiplier,
         :limit_order_id, :executed_at)
    ON CONFLICT (id) DO NOTHING
    RETURNING id
""")


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def _row_to_holding(row: Any) -> Holding:
    return Holding(
        player_id=row.player_id,
        player_name=row.player_name,
        shares=int(row.shares),
        average_price=float(row.average_price),
        current_price=float(row.current_price),
        purchase_date=row.purchase_date,
    )


def _holding_params(user_id: str, book: AccountBook, h: Holding) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "account_book": book.value,
        "player_id": h.player_id,
        "player_name": h.player_name,
        "shares": h.shares,
        "average_price": h.average_price,
        "current_price": h.current_price,
        "purchase_date": h.purchase_date,
    }


def _trade_params(trade: Trade) -> dict[str, Any]:
    return {
        "id": trade.id,
        "user_id": trade.user_id,
        "player_id": trade.player_id,
        "player_name": trade.player_name,
        "direction": trade.direction.value,
        "order_kind": trade.order_kind.value,
        "shares": trade.shares,
        "price": trade.price,
        "total_amount": trade.total_amount,
        "account_book": trade.account_book.value,
        "status": trade.status.value,
        "multiplier": trade.multiplier,
        "limit_order_id": trade.limit_order_id,
        "executed_at": trade.timestamp,
    }


class SqlPortfolioStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _run(self, op: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    return await work(db)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("%s failed: %s", op, e)
            raise TransientBackendError(f"{op}: {type(e).__name__}") from e

    async def load_portfolio(self, user_id: str) -> Portfolio | None:
        async def work(db: AsyncSession) -> Portfolio | None:
            row = (await db.execute(_GET_PORTFOLIO_SQL, {"user_id": user_id})).fetchone()
            if row is None:
                return None
            portfolio = Portfolio(
                user_id=row.user_id,
                available_balance=float(row.available_balance),
                trades_remaining=int(row.trades_remaining),
                last_updated=row.last_updated,
            )
            holdings = (await db.execute(_GET_HOLDINGS_SQL, {"user_id": user_id})).fetchall()
            for h in holdings:
                holding = _row_to_holding(h)
                portfolio.book(AccountBook(h.account_book))[holding.player_id] = holding
            portfolio.recompute_totals()
            return portfolio

        return await self._run("load_portfolio", work)

    async def save_portfolio(self, portfolio: Portfolio) -> bool:
        async def work(db: AsyncSession) -> bool:
            await db.execute(
                _UPSERT_PORTFOLIO_SQL,
                {
                    "user_id": portfolio.user_id,
                    "available_balance": portfolio.available_balance,
                    "trades_remaining": portfolio.trades_remaining,
                    "total_value": portfolio.total_value,
                    "season_pl": portfolio.season_pl,
                    "live_pl": portfolio.live_pl,
                    "todays_pl": portfolio.todays_pl,
                    "last_updated": portfolio.last_updated,
                },
            )
            await db.execute(_DELETE_HOLDINGS_SQL, {"user_id": portfolio.user_id})
            rows = [
                _holding_params(portfolio.user_id, book, h)
                for book in (AccountBook.SEASON, AccountBook.LIVE)
                for h in portfolio.book(book).values()
            ]
            if rows:
                await db.execute(_INSERT_HOLDING_SQL, rows)
            return True

        return await self._run("save_portfolio", work)

    async def append_trade(self, trade: Trade) -> str | None:
        async def work(db: AsyncSession) -> str | None:
            row = (await db.execute(_INSERT_TRADE_SQL, _trade_params(trade))).fetchone()
            return row.id if row is not None else None

        return await self._run("append_trade", work)
