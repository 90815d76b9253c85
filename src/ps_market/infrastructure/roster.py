"""Static roster loader — seeds the PlayerRegistry at process start.

Player ids are stable slugs ("lebron-james") rather than random UUIDs so that
persisted holdings still resolve after a restart.
"""

import logging
import random
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.ps_common.datetime_utils import utc_now
from src.ps_common.money import clamp_price, percent_change, round_money
from src.ps_market.domain.models import Player, PlayerStats, PricePoint

logger = logging.getLogger(__name__)

HISTORY_DAYS = 30
PLAYING_PROBABILITY = 0.7


@dataclass(frozen=True)
class RosterEntry:
    name: str
    team: str
    position: str
    base_price: float
    volatility: float
    jersey: int
    stats: PlayerStats


ROSTER: tuple[RosterEntry, ...] = (
    RosterEntry("LeBron James", "LAL", "SF", 189.50, 0.15, 23,
                PlayerStats(25.3, 7.3, 7.4, 0.504, 0.325, 71, 35.5)),
    RosterEntry("Stephen Curry", "GSW", "PG", 176.25, 0.22, 30,
                PlayerStats(26.4, 4.5, 5.1, 0.427, 0.408, 74, 32.7)),
    RosterEntry("Giannis Antetokounmpo", "MIL", "PF", 195.75, 0.18, 34,
                PlayerStats(31.1, 11.8, 5.7, 0.553, 0.274, 63, 32.1)),
    RosterEntry("Luka Dončić", "DAL", "PG", 182.40, 0.25, 77,
                PlayerStats(32.4, 8.6, 8.0, 0.454, 0.343, 70, 36.2)),
    RosterEntry("Jayson Tatum", "BOS", "SF", 168.90, 0.20, 0,
                PlayerStats(26.9, 8.1, 4.9, 0.466, 0.348, 74, 35.7)),
    RosterEntry("Joel Embiid", "PHI", "C", 173.60, 0.23, 21,
                PlayerStats(33.1, 10.2, 4.2, 0.548, 0.330, 66, 34.6)),
    RosterEntry("Nikola Jokić", "DEN", "C", 187.30, 0.16, 15,
                PlayerStats(24.5, 11.8, 9.8, 0.632, 0.382, 69, 33.7)),
    RosterEntry("Kevin Durant", "PHX", "SF", 165.80, 0.19, 35,
                PlayerStats(27.1, 6.7, 5.0, 0.538, 0.404, 75, 36.9)),
    RosterEntry("Damian Lillard", "MIL", "PG", 159.45, 0.24, 0,
                PlayerStats(24.3, 4.4, 7.0, 0.427, 0.350, 73, 35.3)),
    RosterEntry("Anthony Davis", "LAL", "PF", 171.20, 0.21, 3,
                PlayerStats(25.9, 12.5, 2.6, 0.564, 0.270, 76, 35.1)),
)


def player_slug(name: str) -> str:
    """'Luka Dončić' -> 'luka-doncic'."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    return re.sub(r"[^a-z0-9]+", "-", ascii_name.lower()).strip("-")


def _generate_history(
    base_price: float, volatility: float, rng: random.Random, now: datetime
) -> list[PricePoint]:
    """Daily random walk over the last HISTORY_DAYS days, floored at $10."""
    history: list[PricePoint] = []
    start = now - timedelta(days=HISTORY_DAYS)
    price = base_price * (0.8 + rng.random() * 0.4)
    for day in range(HISTORY_DAYS):
        change = (rng.random() - 0.5) * 2 * volatility * price
        price = clamp_price(price + change)
        history.append(
            PricePoint(
                timestamp=start + timedelta(days=day),
                price=price,
                volume=rng.randint(1000, 10999),
            )
        )
    return history


def build_player(
    entry: RosterEntry, rng: random.Random, now: datetime, is_playing: bool
) -> Player:
    history = _generate_history(entry.base_price, entry.volatility, rng, now)
    current = history[-1].price
    previous = history[-2].price
    slug = player_slug(entry.name)
    return Player(
        id=slug,
        name=entry.name,
        team=entry.team,
        position=entry.position,
        current_price=current,
        volatility=entry.volatility,
        stats=entry.stats,
        jersey=entry.jersey,
        image_url=f"https://cdn.nba.com/headshots/nba/latest/1040x760/{slug.replace('-', '_')}.png",
        is_playing=is_playing,
        price_change_24h=round_money(current - previous),
        price_change_percent_24h=percent_change(previous, current),
        price_history=history,
    )


def load_roster(
    rng: random.Random | None = None,
    all_playing: bool = False,
    entries: tuple[RosterEntry, ...] = ROSTER,
) -> list[Player]:
    """Build the session's players. Roughly 70% are marked playing unless all_playing."""
    rng = rng or random.Random()
    now = utc_now()
    players = [
        build_player(
            entry, rng, now, is_playing=all_playing or rng.random() < PLAYING_PROBABILITY
        )
        for entry in entries
    ]
    logger.info(
        "Loaded %d players (%d playing)", len(players), sum(p.is_playing for p in players)
    )
    return players
