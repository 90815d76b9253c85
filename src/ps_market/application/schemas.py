from pydantic import Field

from src.ps_common.datetime_utils import to_epoch_ms
from src.ps_common.schemas import CamelModel
from src.ps_market.domain.models import Player, PlayerStats, PricePoint


class PlayerStatsSchema(CamelModel):
    ppg: float
    rpg: float
    apg: float
    fg: float
    three_pt: float
    games_played: int
    minutes_per_game: float

    @classmethod
    def from_domain(cls, stats: PlayerStats) -> "PlayerStatsSchema":
        return cls(
            ppg=stats.ppg,
            rpg=stats.rpg,
            apg=stats.apg,
            fg=stats.fg,
            three_pt=stats.three_pt,
            games_played=stats.games_played,
            minutes_per_game=stats.minutes_per_game,
        )


class PricePointSchema(CamelModel):
    timestamp: int  # epoch ms
    price: float
    volume: int

    @classmethod
    def from_domain(cls, point: PricePoint) -> "PricePointSchema":
        return cls(timestamp=to_epoch_ms(point.timestamp), price=point.price, volume=point.volume)


class PlayerSchema(CamelModel):
    id: str
    name: str
    team: str
    position: str
    jersey: int
    image_url: str
    current_price: float
    price_change_24h: float = Field(alias="priceChange24h")
    price_change_percent_24h: float = Field(alias="priceChangePercent24h")
    volatility: float
    is_playing: bool
    stats: PlayerStatsSchema
    price_history: list[PricePointSchema]

    @classmethod
    def from_domain(cls, player: Player, include_history: bool = True) -> "PlayerSchema":
        return cls(
            id=player.id,
            name=player.name,
            team=player.team,
            position=player.position,
            jersey=player.jersey,
            image_url=player.image_url,
            current_price=player.current_price,
            price_change_24h=player.price_change_24h,
            price_change_percent_24h=player.price_change_percent_24h,
            volatility=player.volatility,
            is_playing=player.is_playing,
            stats=PlayerStatsSchema.from_domain(player.stats),
            price_history=(
                [PricePointSchema.from_domain(p) for p in player.price_history]
                if include_history
                else []
            ),
        )


class MoverSchema(CamelModel):
    player_id: str
    player_name: str
    price_change: float
    price_change_percent: float

    @classmethod
    def from_domain(cls, player: Player) -> "MoverSchema":
        return cls(
            player_id=player.id,
            player_name=player.name,
            price_change=player.price_change_24h,
            price_change_percent=player.price_change_percent_24h,
        )


class MarketDataSchema(CamelModel):
    total_market_cap: float
    total_volume_24h: int = Field(alias="totalVolume24h")
    active_traders: int
    top_gainer: MoverSchema | None
    top_loser: MoverSchema | None
