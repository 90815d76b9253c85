"""Persistence Protocol — dependency inversion for testability.

Unit tests inject an AsyncMock conforming to this Protocol; the runtime works
without any store at all (in-memory only).
"""

from typing import Protocol

from src.ps_account.domain.models import Portfolio
from src.ps_trading.domain.models import Trade


class PortfolioStoreProtocol(Protocol):
    async def load_portfolio(self, user_id: str) -> Portfolio | None: ...

    async def save_portfolio(self, portfolio: Portfolio) -> bool: ...

    async def append_trade(self, trade: Trade) -> str | None: ...
