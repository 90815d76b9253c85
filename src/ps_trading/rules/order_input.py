from src.ps_common.enums import AccountBook, TradeDirection
from src.ps_common.errors import InvalidInputError

MAX_ORDER_SHARES = 100_000


def check_shares(shares: object) -> int:
    """Raise InvalidInputError unless shares is a positive int in [1, MAX_ORDER_SHARES]."""
    if isinstance(shares, bool) or not isinstance(shares, int):
        raise InvalidInputError(f"shares must be a whole number, got {shares!r}")
    if not (1 <= shares <= MAX_ORDER_SHARES):
        raise InvalidInputError(f"shares {shares} must be in [1, {MAX_ORDER_SHARES}]")
    return shares


def parse_direction(direction: object) -> TradeDirection:
    try:
        return TradeDirection(direction)
    except ValueError:
        raise InvalidInputError(f"direction must be 'buy' or 'sell', got {direction!r}") from None


def parse_account_book(account_book: object) -> AccountBook:
    try:
        return AccountBook(account_book)
    except ValueError:
        raise InvalidInputError(
            f"account type must be 'season' or 'live', got {account_book!r}"
        ) from None


def check_limit_price(limit_price: object) -> float:
    if isinstance(limit_price, bool) or not isinstance(limit_price, (int, float)):
        raise InvalidInputError(f"limit price must be a number, got {limit_price!r}")
    if limit_price <= 0:
        raise InvalidInputError(f"limit price must be positive, got {limit_price}")
    return float(limit_price)
