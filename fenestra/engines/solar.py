from fenestra.catalog.context import SimulationContext, Surface, AnalysisMode
from .abstract import SolarDistributionEngine


class WindowSolarDistribution(SolarDistributionEngine):
    """Default solar distribution engine for a single, unshaded window that
    receives beam radiation at normal incidence."""

    def init_solar_gains(
        self,
        context: SimulationContext,
        surface: Surface,
        irradiance: float,
        mode: AnalysisMode
    ) -> None:
        surface.beam_irradiance = irradiance
        surface.sun_is_up = irradiance > 0.0
        n = len(context.glazings_of(surface))
        surface.absorbed_solar = [0.0] * n
        surface.transmitted_solar = 0.0

    def distribute_interior_solar(
        self,
        context: SimulationContext,
        surface: Surface,
        mode: AnalysisMode
    ) -> None:
        if not surface.sun_is_up:
            return
        optics = context.optics_of(surface)
        I = surface.beam_irradiance
        surface.absorbed_solar = [a * I for a in optics.layer_absorptance]
        surface.transmitted_solar = optics.solar_transmittance * I