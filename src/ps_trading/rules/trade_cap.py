from src.ps_account.domain.models import Portfolio
from src.ps_common.enums import AccountBook
from src.ps_common.errors import TradeLimitExceededError


def check_trade_cap(portfolio: Portfolio, account_book: AccountBook) -> None:
    """Raise TradeLimitExceededError when a live-book trade has no session quota left."""
    if account_book is AccountBook.LIVE and portfolio.trades_remaining <= 0:
        raise TradeLimitExceededError()
