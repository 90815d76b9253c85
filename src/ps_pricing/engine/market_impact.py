"""Market impact — how far a trade's own size pushes the price.

Pure functions: callers decide whether to apply new_price through the
PriceSimulationEngine.
"""

from src.ps_common.enums import ImpactLevel, TradeDirection
from src.ps_common.money import PRICE_FLOOR, round_money
from src.ps_pricing.domain.models import MarketImpactResult

BASE_CIRCULATING_SUPPLY = 1_000_000
MAX_IMPACT = 0.10

# Ascending |impact| thresholds (fractions, 0.005 == 0.5%)
MODERATE_THRESHOLD = 0.005
SIGNIFICANT_THRESHOLD = 0.02
MAJOR_THRESHOLD = 0.05

BROADCAST_SHARES = 100
FLASH_TRIGGER_SHARES = 500

# (min shares, multiplier), checked largest first
_SIZE_TIERS: tuple[tuple[int, float], ...] = ((500, 1.5), (250, 1.3), (100, 1.2))


def classify_impact(abs_impact: float) -> ImpactLevel:
    if abs_impact >= MAJOR_THRESHOLD:
        return ImpactLevel.MAJOR
    if abs_impact >= SIGNIFICANT_THRESHOLD:
        return ImpactLevel.SIGNIFICANT
    if abs_impact >= MODERATE_THRESHOLD:
        return ImpactLevel.MODERATE
    return ImpactLevel.MINIMAL


def _size_multiplier(shares: int) -> float:
    for min_shares, multiplier in _SIZE_TIERS:
        if shares >= min_shares:
            return multiplier
    return 1.0


def calculate_trade_impact(
    volatility: float,
    direction: TradeDirection,
    shares: int,
    current_price: float,
) -> MarketImpactResult:
    trade_volume = shares * current_price
    market_cap = BASE_CIRCULATING_SUPPLY * current_price
    volume_ratio = trade_volume / market_cap if market_cap else 0.0

    volatility_multiplier = 1 + volatility * 2
    direction_multiplier = 1 if direction is TradeDirection.BUY else -1

    impact = volume_ratio * volatility_multiplier * direction_multiplier
    impact *= _size_multiplier(shares)
    impact = max(-MAX_IMPACT, min(MAX_IMPACT, impact))

    price_impact = current_price * impact
    new_price = max(PRICE_FLOOR, current_price + price_impact)
    level = classify_impact(abs(impact))

    return MarketImpactResult(
        price_impact=round_money(price_impact),
        price_impact_percent=round_money(impact * 100),
        new_price=round_money(new_price),
        impact_level=level,
        broadcast_required=level is not ImpactLevel.MINIMAL or shares >= BROADCAST_SHARES,
    )


def impact_description(level: ImpactLevel, shares: int, player_name: str) -> str:
    if level is ImpactLevel.MAJOR:
        return f"MASSIVE {shares} share trade sending {player_name}'s price soaring!"
    if level is ImpactLevel.SIGNIFICANT:
        return f"Large {shares} share trade causing price movement in {player_name}"
    if level is ImpactLevel.MODERATE:
        return f"{shares} shares moving {player_name}'s price"
    return f"Small trade of {shares} shares"


def should_trigger_flash(result: MarketImpactResult, shares: int) -> bool:
    return result.impact_level is ImpactLevel.MAJOR or shares >= FLASH_TRIGGER_SHARES


def flash_multiplier_for(result: MarketImpactResult) -> float:
    return {
        ImpactLevel.MAJOR: 1.25,
        ImpactLevel.SIGNIFICANT: 1.20,
        ImpactLevel.MODERATE: 1.15,
    }.get(result.impact_level, 1.0)
