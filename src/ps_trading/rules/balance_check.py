from src.ps_account.domain.models import Portfolio
from src.ps_common.errors import InsufficientFundsError
from src.ps_common.money import round_money


def check_balance(portfolio: Portfolio, shares: int, price: float) -> float:
    """Return the buy cost; raise InsufficientFundsError if the balance cannot cover it."""
    cost = round_money(shares * price)
    if portfolio.available_balance < cost:
        raise InsufficientFundsError(cost, portfolio.available_balance)
    return cost
