"""Domain models for ps_account: pure dataclasses, no persistence dependency.

Holding.total_value / unrealized_pl / unrealized_pl_percent are caches of
(shares, average_price, current_price). Anything that changes one of those
three inputs must call refresh() (or go through PortfolioLedger).
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.ps_common.enums import AccountBook
from src.ps_common.money import round_money


@dataclass
class Holding:
    player_id: str
    player_name: str
    shares: int
    average_price: float     # weighted-average cost basis, unrounded
    current_price: float
    purchase_date: datetime
    total_value: float = 0.0
    unrealized_pl: float = 0.0
    unrealized_pl_percent: float = 0.0

    def __post_init__(self) -> None:
        self.refresh()

    @property
    def cost_basis(self) -> float:
        return self.shares * self.average_price

    def refresh(self, current_price: float | None = None) -> None:
        if current_price is not None:
            self.current_price = current_price
        self.total_value = round_money(self.shares * self.current_price)
        self.unrealized_pl = round_money(self.total_value - self.cost_basis)
        cost = self.cost_basis
        self.unrealized_pl_percent = round_money(self.unrealized_pl / cost * 100) if cost else 0.0


@dataclass
class Portfolio:
    user_id: str
    available_balance: float
    trades_remaining: int
    last_updated: datetime
    season_holdings: dict[str, Holding] = field(default_factory=dict)
    live_holdings: dict[str, Holding] = field(default_factory=dict)
    total_value: float = 0.0
    season_pl: float = 0.0
    live_pl: float = 0.0
    todays_pl: float = 0.0

    def __post_init__(self) -> None:
        self.recompute_totals()

    def book(self, account_book: AccountBook) -> dict[str, Holding]:
        if account_book is AccountBook.LIVE:
            return self.live_holdings
        return self.season_holdings

    def holdings(self) -> list[Holding]:
        return [*self.season_holdings.values(), *self.live_holdings.values()]

    @property
    def season_value(self) -> float:
        return round_money(sum(h.total_value for h in self.season_holdings.values()))

    @property
    def live_value(self) -> float:
        return round_money(sum(h.total_value for h in self.live_holdings.values()))

    def recompute_totals(self) -> None:
        self.season_pl = round_money(sum(h.unrealized_pl for h in self.season_holdings.values()))
        self.live_pl = round_money(sum(h.unrealized_pl for h in self.live_holdings.values()))
        self.todays_pl = round_money(self.season_pl + self.live_pl)
        self.total_value = round_money(self.season_value + self.live_value + self.available_balance)
