from dataclasses import dataclass, field
from .abstract import (
    HeatBalanceEngine,
    HeatBalanceResult,
    ConvectionEngine,
    OpticalEngine,
    SolarDistributionEngine
)
from .optics import MultilayerOptics
from .convection import ISO15099Convection
from .solar import WindowSolarDistribution
from .heat_balance import GlazingHeatBalance


@dataclass
class Engines:
    """The set of engines that perform the physics of a window analysis."""
    heat_balance: HeatBalanceEngine = field(default_factory=GlazingHeatBalance)
    convection: ConvectionEngine = field(default_factory=ISO15099Convection)
    optics: OpticalEngine = field(default_factory=MultilayerOptics)
    solar: SolarDistributionEngine = field(default_factory=WindowSolarDistribution)

    @classmethod
    def default(
        cls,
        inner_max_iterations: int = 50,
        inner_tolerance: float = 1.e-3,
        edge_band: float = 0.0635
    ) -> 'Engines':
        return cls(
            heat_balance=GlazingHeatBalance(
                inner_max_iterations, inner_tolerance, edge_band
            )
        )
