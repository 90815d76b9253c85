"""Domain models for ps_market: pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime

PRICE_HISTORY_CAPACITY = 100


@dataclass(frozen=True)
class PlayerStats:
    ppg: float   # points per game
    rpg: float   # rebounds per game
    apg: float   # assists per game
    fg: float    # field goal percentage, 0-1
    three_pt: float
    games_played: int
    minutes_per_game: float


@dataclass(frozen=True)
class PricePoint:
    timestamp: datetime
    price: float
    volume: int


@dataclass
class Player:
    id: str
    name: str
    team: str
    position: str            # PG / SG / SF / PF / C, display only
    current_price: float
    volatility: float        # (0, 1), scales tick noise
    stats: PlayerStats
    jersey: int = 0
    image_url: str = ""
    is_playing: bool = True
    price_change_24h: float = 0.0
    price_change_percent_24h: float = 0.0
    price_history: list[PricePoint] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.is_playing


@dataclass(frozen=True)
class PriceChange:
    """One applied price mutation, as handed to price observers."""

    player_id: str
    old_price: float
    new_price: float
    change: float
    change_percent: float
