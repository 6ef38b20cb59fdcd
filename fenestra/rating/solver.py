"""
Steady-state temperatures and heat gain of the window installed in the
scratch model of a `CatalogSandbox`, at one environmental condition.
"""
from __future__ import annotations
from dataclasses import dataclass
from fenestra.logging import ModuleLogger
from fenestra.config import SolverSettings
from fenestra.glazing import EnvironmentalCondition
from fenestra.catalog.context import SimulationContext
from fenestra.engines import Engines, HeatBalanceResult

logger = ModuleLogger.get_logger(__name__)


def forced_convection_coefficient(wind_speed: float) -> float:
    """Wind-forced convection coefficient on the exterior side of the window
    [W/(m².K)], with `wind_speed` in m/s."""
    return 4.0 + 4.0 * wind_speed


def initial_guesses(
    T_in: float,
    T_out: float,
    number_of_panes: int
) -> tuple[float, float]:
    """
    Returns the initial guess of the interior and exterior surface temperature.

    The temperature difference between indoor and outdoor air is spread evenly
    over 2 + 2 * number_of_panes nodes: the indoor and outdoor air and the
    faces of each pane.
    """
    n = 2 + 2 * number_of_panes
    dT = (T_in - T_out) / (n - 1)
    return T_in - dT, T_out + dT


@dataclass(frozen=True)
class SolverResult:
    """
    Outcome of `PerformanceSolver.calc_window_performance()`.

    Attributes
    ----------
    condition:
        Name of the environmental condition.
    converged:
        True if both surface temperatures changed less than the tolerance in
        the last iteration. If False, the last iterate was accepted because
        the iteration cap was reached.
    iterations:
        Number of iterations done.
    residuals:
        Change of the interior and exterior surface temperature in the last
        iteration [K].
    T_in_surf:
        Interior surface temperature of the glazing [°C].
    T_out_surf:
        Exterior surface temperature of the glazing [°C].
    heat_gain:
        Net heat gain of the zone through the window [W].
    layer_absorption:
        Solar radiation absorbed by each pane [W/m²].
    u_center:
        Center-of-glass U-factor [W/(m².K)].
    u_edge:
        Edge-of-glass U-factor [W/(m².K)].
    """
    condition: str
    converged: bool
    iterations: int
    residuals: tuple[float, float]
    T_in_surf: float
    T_out_surf: float
    heat_gain: float
    layer_absorption: tuple[float, ...]
    u_center: float
    u_edge: float


class PerformanceSolver:
    """
    Iterates between the convection engine and the heat balance engine until
    the interior and exterior surface temperatures of the window no longer
    change.

    Parameters
    ----------
    context:
        The simulation context that holds the scratch model with the window
        installed (i.e. the context of an active `CatalogSandbox`).
    engines:
        The engines that perform the physics.
    settings:
        Iteration cap and tolerance.
    """

    def __init__(
        self,
        context: SimulationContext,
        engines: Engines,
        settings: SolverSettings = SolverSettings()
    ) -> None:
        self.context = context
        self.engines = engines
        self.settings = settings

    def calc_window_performance(self, condition: EnvironmentalCondition) -> SolverResult:
        """Solves the window at the given environmental condition."""
        ctx = self.context
        mode = ctx.mode
        surface = ctx.surface
        T_in, T_out, wind_speed, I_solar = condition.magnitudes
        max_iter = self.settings.max_iterations
        tol = self.settings.tolerance.to('K').m

        ctx.zone.air_temperature = T_in
        surface.outdoor_temperature = T_out
        n_panes = len(ctx.glazings_of(surface))
        T_in_surf, T_out_surf = initial_guesses(T_in, T_out, n_panes)

        self.engines.solar.init_solar_gains(ctx, surface, I_solar, mode)
        self.engines.solar.distribute_interior_solar(ctx, surface, mode)
        h_forced = forced_convection_coefficient(wind_speed)

        tilt = surface.tilt
        result: HeatBalanceResult | None = None
        converged = False
        residuals = (float('inf'), float('inf'))
        i = 0
        while i < max_iter:
            i += 1
            # exterior side: the outside face looks in the opposite direction
            surface.tilt = 180.0 - tilt
            try:
                h_ext = self.engines.convection.natural_convection_coefficient(
                    ctx, surface, T_out_surf, T_out, mode
                )
            finally:
                surface.tilt = tilt
            h_ext += h_forced
            h_int = self.engines.convection.natural_convection_coefficient(
                ctx, surface, T_in_surf, T_in, mode
            )
            result = self.engines.heat_balance.evaluate(
                ctx, surface, h_ext, h_int, T_in_surf, T_out_surf,
                T_in, T_out, mode
            )
            residuals = (
                abs(result.T_in_surf - T_in_surf),
                abs(result.T_out_surf - T_out_surf)
            )
            T_in_surf, T_out_surf = result.T_in_surf, result.T_out_surf
            logger.debug(
                f"{condition.name} iteration {i}: "
                f"T_in_surf = {T_in_surf:.3f} °C, "
                f"T_out_surf = {T_out_surf:.3f} °C, "
                f"residuals = ({residuals[0]:.4f}, {residuals[1]:.4f}) K"
            )
            if residuals[0] < tol and residuals[1] < tol:
                converged = True
                break
        if not converged:
            logger.warning(
                f"Window '{surface.name}' at {condition.name} condition did "
                f"not converge within {max_iter} iterations "
                f"(residuals {residuals[0]:.3f} K, {residuals[1]:.3f} K); "
                f"the last iterate is used"
            )
        self._write_report_arrays(result)
        return SolverResult(
            condition=condition.name,
            converged=converged,
            iterations=i,
            residuals=residuals,
            T_in_surf=result.T_in_surf,
            T_out_surf=result.T_out_surf,
            heat_gain=result.heat_gain,
            layer_absorption=tuple(result.layer_absorption),
            u_center=result.u_center,
            u_edge=result.u_edge
        )

    def _write_report_arrays(self, result: HeatBalanceResult) -> None:
        arrays = self.context.report_arrays
        surface = self.context.surface
        values = {
            'window_heat_gain': result.heat_gain,
            'window_transmitted_solar': surface.transmitted_solar * surface.area,
            'window_inside_surface_temperature': result.T_in_surf,
            'window_outside_surface_temperature': result.T_out_surf
        }
        for var, value in values.items():
            if var in arrays:
                arrays[var][0] = value
