"""TradeLog: bounded, newest-first, append-only record of executed trades."""

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.ps_common.datetime_utils import utc_now
from src.ps_common.enums import AccountBook, TradeDirection
from src.ps_common.errors import InvalidInputError
from src.ps_common.money import round_money
from src.ps_trading.domain.models import Trade

TRADE_LOG_CAPACITY = 1000

VOLUME_WINDOWS: dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


@dataclass(frozen=True)
class TradeVolume:
    player_id: str
    window: str
    total_volume: float
    total_shares: int
    buy_volume: float
    sell_volume: float
    trade_count: int
    average_trade_size: float


@dataclass(frozen=True)
class TradePage:
    trades: list[Trade]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


class TradeLog:
    def __init__(
        self,
        capacity: int = TRADE_LOG_CAPACITY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        # appendleft keeps index 0 the newest; maxlen drops the oldest
        self._trades: deque[Trade] = deque(maxlen=capacity)
        self._clock = clock

    def append(self, trade: Trade) -> None:
        self._trades.appendleft(trade)

    def __len__(self) -> int:
        return len(self._trades)

    def recent(self, limit: int = 50) -> list[Trade]:
        return list(self._trades)[:max(0, limit)]

    def for_user(
        self,
        user_id: str,
        account_book: AccountBook | None = None,
        direction: TradeDirection | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> TradePage:
        if page < 1 or limit < 1:
            raise InvalidInputError("page and limit must be >= 1")
        matched = [
            t for t in self._trades
            if t.user_id == user_id
            and (account_book is None or t.account_book is account_book)
            and (direction is None or t.direction is direction)
        ]
        start = (page - 1) * limit
        return TradePage(trades=matched[start:start + limit], page=page, limit=limit, total=len(matched))

    def volume(self, player_id: str, window: str = "24h") -> TradeVolume:
        span = VOLUME_WINDOWS.get(window)
        if span is None:
            raise InvalidInputError(f"window must be one of {', '.join(VOLUME_WINDOWS)}")
        since = self._clock() - span

        buy_volume = sell_volume = 0.0
        shares = count = 0
        for trade in self._trades:
            if trade.player_id != player_id or trade.timestamp < since:
                continue
            count += 1
            shares += trade.shares
            if trade.direction is TradeDirection.BUY:
                buy_volume += trade.total_amount
            else:
                sell_volume += trade.total_amount

        total = round_money(buy_volume + sell_volume)
        return TradeVolume(
            player_id=player_id,
            window=window,
            total_volume=total,
            total_shares=shares,
            buy_volume=round_money(buy_volume),
            sell_volume=round_money(sell_volume),
            trade_count=count,
            average_trade_size=round_money(total / count) if count else 0.0,
        )
