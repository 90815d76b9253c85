"""Game events and flash multipliers: ephemeral, never persisted."""

from dataclasses import dataclass
from datetime import datetime

from src.ps_common.enums import GameEventType


@dataclass(frozen=True)
class GameEventTemplate:
    """A scripted play. player_ref is resolved by id first, then by name."""

    player_ref: str
    event_type: GameEventType
    description: str
    price_impact: float
    multiplier: float | None = None
    quarter: int = 3
    game_time: str = "5:30"


@dataclass(frozen=True)
class GameEvent:
    id: str
    timestamp: datetime
    player_id: str
    player_name: str
    event_type: GameEventType
    description: str
    price_impact: float
    quarter: int
    game_time: str
    multiplier: float | None = None

    @property
    def has_flash(self) -> bool:
        return self.multiplier is not None and self.multiplier > 1


@dataclass
class FlashMultiplier:
    player_id: str
    player_name: str
    multiplier: float
    duration: float          # seconds
    start_time: datetime
    event_description: str
    is_active: bool = True

    def elapsed(self, now: datetime) -> float:
        return (now - self.start_time).total_seconds()

    def is_expired(self, now: datetime) -> bool:
        return self.elapsed(now) >= self.duration

    def remaining(self, now: datetime) -> float:
        return max(0.0, self.duration - self.elapsed(now))
