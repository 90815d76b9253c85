from src.ps_account.domain.models import Holding, Portfolio
from src.ps_common.enums import AccountBook
from src.ps_common.errors import InsufficientSharesError


def check_position(
    portfolio: Portfolio, account_book: AccountBook, player_id: str, shares: int
) -> Holding:
    """Sell side: the holding must exist in the same book with enough shares."""
    holding = portfolio.book(account_book).get(player_id)
    held = holding.shares if holding is not None else 0
    if holding is None or held < shares:
        raise InsufficientSharesError(held, shares)
    return holding
