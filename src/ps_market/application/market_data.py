"""Market-wide snapshot broadcast as `market_data`."""

import random

from src.ps_common.money import round_money
from src.ps_market.application.schemas import MarketDataSchema, MoverSchema
from src.ps_market.domain.registry import PlayerRegistry

CIRCULATING_SUPPLY = 1_000_000


def build_market_snapshot(
    registry: PlayerRegistry,
    rng: random.Random | None = None,
    active_traders: int | None = None,
) -> MarketDataSchema:
    """Total cap, synthetic volume/trader counts, and the biggest movers.

    Top gainer is only reported among players that actually rose (same for
    losers); with no movers in a direction the field is None.
    """
    rng = rng or random.Random()
    players = registry.list_all()
    gainers = [p for p in players if p.price_change_percent_24h > 0]
    losers = [p for p in players if p.price_change_percent_24h < 0]
    top_gainer = max(gainers, key=lambda p: p.price_change_percent_24h) if gainers else None
    top_loser = min(losers, key=lambda p: p.price_change_percent_24h) if losers else None

    return MarketDataSchema(
        total_market_cap=round_money(sum(p.current_price * CIRCULATING_SUPPLY for p in players)),
        total_volume_24h=rng.randint(1_000_000, 10_999_999),
        active_traders=active_traders if active_traders is not None else rng.randint(100, 599),
        top_gainer=MoverSchema.from_domain(top_gainer) if top_gainer else None,
        top_loser=MoverSchema.from_domain(top_loser) if top_loser else None,
    )
