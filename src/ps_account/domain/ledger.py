"""PortfolioLedger — the only code that mutates Portfolio / Holding state.

apply_buy / apply_sell assume the caller already validated the order (see
ps_trading.rules); they perform no checks that could fail half-way, so a
settlement either applies completely or not at all.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime

from src.ps_account.domain.models import Holding, Portfolio
from src.ps_common.datetime_utils import utc_now
from src.ps_common.enums import AccountBook
from src.ps_common.errors import PortfolioNotFoundError
from src.ps_common.money import dollars_to_display, round_money

logger = logging.getLogger(__name__)

DEFAULT_STARTING_BALANCE = 10_000.0
DEFAULT_LIVE_TRADES = 5


class PortfolioLedger:
    def __init__(
        self,
        starting_balance: float = DEFAULT_STARTING_BALANCE,
        live_trades_per_session: int = DEFAULT_LIVE_TRADES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._portfolios: dict[str, Portfolio] = {}
        self._starting_balance = starting_balance
        self._live_trades = live_trades_per_session
        self._clock = clock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, user_id: str) -> Portfolio:
        """Return the user's portfolio, creating a fresh one on first sight."""
        portfolio = self._portfolios.get(user_id)
        if portfolio is None:
            portfolio = Portfolio(
                user_id=user_id,
                available_balance=self._starting_balance,
                trades_remaining=self._live_trades,
                last_updated=self._clock(),
            )
            self._portfolios[user_id] = portfolio
            logger.info(
                "Opened portfolio for %s with %s", user_id, dollars_to_display(self._starting_balance)
            )
        return portfolio

    def adopt(self, portfolio: Portfolio) -> Portfolio:
        """Register a portfolio loaded from persistence, replacing any in-memory one."""
        portfolio.recompute_totals()
        self._portfolios[portfolio.user_id] = portfolio
        return portfolio

    def close(self, user_id: str) -> None:
        self._portfolios.pop(user_id, None)

    def get(self, user_id: str) -> Portfolio | None:
        return self._portfolios.get(user_id)

    def require(self, user_id: str) -> Portfolio:
        portfolio = self._portfolios.get(user_id)
        if portfolio is None:
            raise PortfolioNotFoundError(user_id)
        return portfolio

    def list_all(self) -> list[Portfolio]:
        return list(self._portfolios.values())

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._portfolios

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def apply_buy(
        self,
        portfolio: Portfolio,
        account_book: AccountBook,
        player_id: str,
        player_name: str,
        shares: int,
        price: float,
    ) -> Holding:
        cost = round_money(shares * price)
        now = self._clock()
        portfolio.available_balance = round_money(portfolio.available_balance - cost)

        book = portfolio.book(account_book)
        holding = book.get(player_id)
        if holding is None:
            holding = Holding(
                player_id=player_id,
                player_name=player_name,
                shares=shares,
                average_price=price,
                current_price=price,
                purchase_date=now,
            )
            book[player_id] = holding
        else:
            total_shares = holding.shares + shares
            holding.average_price = (holding.cost_basis + shares * price) / total_shares
            holding.shares = total_shares
            holding.refresh(price)

        self._finish(portfolio, account_book, now)
        return holding

    def apply_sell(
        self,
        portfolio: Portfolio,
        account_book: AccountBook,
        player_id: str,
        shares: int,
        price: float,
    ) -> Holding | None:
        """Returns the remaining holding, or None when the position was closed."""
        proceeds = round_money(shares * price)
        now = self._clock()
        portfolio.available_balance = round_money(portfolio.available_balance + proceeds)

        book = portfolio.book(account_book)
        holding = book[player_id]
        remaining: Holding | None
        if holding.shares == shares:
            del book[player_id]
            remaining = None
        else:
            holding.shares -= shares
            holding.refresh(price)
            remaining = holding

        self._finish(portfolio, account_book, now)
        return remaining

    def _finish(self, portfolio: Portfolio, account_book: AccountBook, now: datetime) -> None:
        if account_book is AccountBook.LIVE:
            portfolio.trades_remaining = max(0, portfolio.trades_remaining - 1)
        portfolio.last_updated = now
        portfolio.recompute_totals()

    def reset_live_session(self, user_id: str) -> Portfolio:
        portfolio = self.require(user_id)
        portfolio.trades_remaining = self._live_trades
        portfolio.last_updated = self._clock()
        return portfolio

    # ------------------------------------------------------------------
    # Price sync
    # ------------------------------------------------------------------

    def sync_prices(self, prices: Mapping[str, float]) -> list[str]:
        """Push current prices into every holding. Returns user ids whose value changed."""
        changed: list[str] = []
        for portfolio in self._portfolios.values():
            before = portfolio.total_value
            for holding in portfolio.holdings():
                price = prices.get(holding.player_id)
                if price is not None and price != holding.current_price:
                    holding.refresh(price)
            portfolio.recompute_totals()
            if portfolio.total_value != before:
                changed.append(portfolio.user_id)
        return changed
