"""Dollar arithmetic helpers.

Prices, balances and P&L are floats in dollars, rounded half-up to cents at
every point where they are stored or compared. Only these helpers round.
"""

from decimal import ROUND_HALF_UP, Decimal

PRICE_FLOOR = 10.0


def round_money(amount: float) -> float:
    """Round to 2 decimals, half-up: 2.675 -> 2.68 (plain round() gives 2.67)."""
    return float(Decimal(repr(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def clamp_price(price: float) -> float:
    """Apply the $10 floor and round to cents."""
    return round_money(max(PRICE_FLOOR, price))


def percent_change(old: float, new: float) -> float:
    """(new - old) / old * 100, rounded to 2 decimals; 0 when old is 0."""
    if old == 0:
        return 0.0
    return round_money((new - old) / old * 100)


def dollars_to_display(amount: float) -> str:
    """Convert dollars to display string: 6500.5 -> '$6,500.50', -12 -> '-$12.00'."""
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"
