"""
Natural convection heat transfer coefficient of a (tilted) window surface
according to the indoor correlations of ISO 15099:2003, §8.3.2.2.

The air properties are evaluated at the mean film temperature
T_m = T_air + 0.25 * (T_surf - T_air). The Rayleigh number is based on the
height of the surface.
"""
import math
from fenestra.glazing.gases import Gas, P_ATM
from fenestra.catalog.context import SimulationContext, Surface, AnalysisMode
from .abstract import ConvectionEngine

g = 9.81  # m / s ** 2

AIR = Gas.AIR.properties


def rayleigh_number(H: float, T_surf: float, T_air: float) -> tuple[float, float]:
    """Returns the Rayleigh number based on height `H` [m] and the
    conductivity of air at the mean film temperature. Temperatures in K."""
    T_m = T_air + 0.25 * (T_surf - T_air)
    rho = AIR.rho(T_m, P_ATM)
    mu = AIR.mu(T_m)
    k = AIR.k(T_m)
    cp = AIR.cp(T_m)
    Ra_H = (rho ** 2) * (H ** 3) * g * cp * abs(T_surf - T_air) / (T_m * mu * k)
    return Ra_H, k


def nusselt_number(Ra_H: float, tilt: float) -> float:
    """
    Average Nusselt number of a tilted plate.

    Parameters
    ----------
    Ra_H:
        Rayleigh number based on the height of the plate.
    tilt:
        Angle between the plate and the horizontal in the direction of the
        heat flow [deg]: 0° is a horizontal plate with heat flowing upwards
        (a heated plate facing upwards or a cooled plate facing downwards).
    """
    if Ra_H <= 0.0:
        return 0.0
    s = math.sin(math.radians(tilt))
    if tilt < 15.0:
        return 0.13 * Ra_H ** (1 / 3)
    if tilt <= 90.0:
        Ra_cv = 2.5e5 * (math.exp(0.72 * tilt) / s) ** 0.2
        if Ra_H <= Ra_cv:
            return 0.56 * (Ra_H * s) ** 0.25
        return 0.13 * (Ra_H ** (1 / 3) - Ra_cv ** (1 / 3)) + 0.56 * (Ra_cv * s) ** 0.25
    if tilt <= 179.0:
        return 0.56 * (Ra_H * s) ** 0.25
    return 0.58 * Ra_H ** 0.2


class ISO15099Convection(ConvectionEngine):
    """Default convection engine."""

    def natural_convection_coefficient(
        self,
        context: SimulationContext,
        surface: Surface,
        T_surf: float,
        T_air: float,
        mode: AnalysisMode
    ) -> float:
        T_surf_K = T_surf + 273.15
        T_air_K = T_air + 273.15
        tilt = surface.tilt
        if T_surf_K > T_air_K:
            # the surface heats the air: heat flows in the opposite direction
            tilt = 180.0 - tilt
        Ra_H, k = rayleigh_number(surface.height, T_surf_K, T_air_K)
        Nu = nusselt_number(Ra_H, tilt)
        return Nu * k / surface.height
