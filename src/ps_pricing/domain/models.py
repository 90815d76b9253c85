from dataclasses import dataclass

from src.ps_common.enums import ImpactLevel


@dataclass(frozen=True)
class MarketImpactResult:
    price_impact: float           # dollars, signed
    price_impact_percent: float   # percent, signed, 2 decimals (2.5 == 2.5%)
    new_price: float
    impact_level: ImpactLevel
    broadcast_required: bool

    @property
    def moves_market(self) -> bool:
        return self.impact_level is not ImpactLevel.MINIMAL


class EngineState:
    STOPPED = "stopped"
    RUNNING = "running"
