"""
Steady-state heat balance of a multi-pane window.

The glazing system is modeled as a one-dimensional network with a node on
each glass face: 2 * N nodes for N panes. Each face exchanges heat by
conduction through its pane, by convection and long-wave radiation across
the adjacent gap or with the environment, and receives half of the solar
radiation absorbed in its pane. Radiation and gap convection are linearized
around the current face temperatures; the linear system is solved repeatedly
until the face temperatures don't change anymore.

Frame and dividers are added to the heat gain of the window through a series
network of exterior surface film, frame conductance and interior surface
film. The edge-of-glass zone along the frame is accounted for with the
edge-of-glass U-factor derived from the spacer correlation.

References
----------
ISO 15099:2003. Thermal performance of windows, doors and shading devices:
Detailed calculations.
"""
from __future__ import annotations
import math
import numpy as np
from fenestra.logging import ModuleLogger
from fenestra.glazing import GapLayer, GlazingLayer, FrameDividerSpec
from fenestra.catalog.context import (
    SimulationContext,
    Surface,
    AnalysisMode,
    WindowGeometry
)
from .abstract import HeatBalanceEngine, HeatBalanceResult

logger = ModuleLogger.get_logger(__name__)

SIGMA = 5.670374419e-8  # W / (m ** 2 * K ** 4)
g = 9.81  # m / s ** 2


def _nusselt_vertical(Ra: float, A_gap: float) -> float:
    # ISO 15099, eq. 42 to 44
    if Ra > 5.e4:
        Nu1 = 0.0673838 * Ra ** (1 / 3)
    elif Ra > 1.e4:
        Nu1 = 0.028154 * Ra ** 0.4134
    else:
        Nu1 = 1.0 + 1.7596678e-10 * Ra ** 2.2984755
    Nu2 = 0.242 * (Ra / A_gap) ** 0.272
    return max(Nu1, Nu2)


def _nusselt_60(Ra: float, A_gap: float) -> float:
    # ISO 15099, eq. 38 to 41
    G = 0.5 / (1.0 + (Ra / 3160.0) ** 20.6) ** 0.1
    Nu1 = (1.0 + (0.0936 * Ra ** 0.314 / (1.0 + G)) ** 7) ** (1 / 7)
    Nu2 = (0.104 + 0.175 / A_gap) * Ra ** 0.283
    return max(Nu1, Nu2)


def _nusselt_hollands(Ra: float, tilt: float) -> float:
    # ISO 15099, eq. 37 (0° <= tilt < 60°)
    x = Ra * math.cos(math.radians(tilt))
    if x <= 0.0:
        return 1.0
    s = math.sin(math.radians(1.8 * tilt)) ** 1.6
    term1 = max(0.0, 1.0 - 1708.0 / x) * (1.0 - 1708.0 * s / x)
    term2 = max(0.0, (x / 5830.0) ** (1 / 3) - 1.0)
    return 1.0 + 1.44 * term1 + term2


def gap_nusselt_number(Ra: float, A_gap: float, tilt: float) -> float:
    """
    Average Nusselt number of the convective heat transfer across a gas-filled
    cavity.

    Parameters
    ----------
    Ra:
        Rayleigh number based on the gap thickness.
    A_gap:
        Aspect ratio of the cavity (height / thickness).
    tilt:
        Tilt angle of the cavity [deg].
    """
    if Ra <= 0.0:
        return 1.0
    if tilt < 60.0:
        return _nusselt_hollands(Ra, tilt)
    if tilt <= 90.0:
        Nu60 = _nusselt_60(Ra, A_gap)
        Nu90 = _nusselt_vertical(Ra, A_gap)
        return Nu60 + (Nu90 - Nu60) * (tilt - 60.0) / 30.0
    Nu90 = _nusselt_vertical(Ra, A_gap)
    return 1.0 + (Nu90 - 1.0) * math.sin(math.radians(tilt))


def gap_coefficients(
    gap: GapLayer,
    T_a: float,
    T_b: float,
    e_a: float,
    e_b: float,
    height: float,
    tilt: float
) -> tuple[float, float]:
    """
    Returns the convective and the radiative heat transfer coefficient across
    a gap [W/(m².K)].

    Parameters
    ----------
    gap:
        The gap layer.
    T_a, T_b:
        Temperatures [K] of the glass faces on either side of the gap.
    e_a, e_b:
        Emissivities of the glass faces on either side of the gap.
    height:
        Height of the cavity [m].
    tilt:
        Tilt angle of the cavity [deg].
    """
    props = gap.properties
    d = gap.thickness
    T_m = 0.5 * (T_a + T_b)
    rho = props.rho(T_m)
    mu = props.mu(T_m)
    k = props.k(T_m)
    cp = props.cp(T_m)
    dT = abs(T_a - T_b)
    Ra = (rho ** 2) * (d ** 3) * g * cp * dT / (T_m * mu * k)
    Nu = gap_nusselt_number(Ra, height / d, tilt)
    h_c = Nu * k / d
    h_r = SIGMA * (T_a ** 2 + T_b ** 2) * (T_a + T_b) / (1 / e_a + 1 / e_b - 1)
    return h_c, h_r


def radiative_coefficient(T_surf: float, T_rad: float, e: float) -> float:
    """Linearized radiative heat transfer coefficient between a surface at
    `T_surf` and large surroundings at `T_rad` (both in K)."""
    return e * SIGMA * (T_surf ** 2 + T_rad ** 2) * (T_surf + T_rad)


def film_u_factor(
    h_out: float,
    h_in: float,
    conductance: float
) -> float:
    """U-factor of a frame or divider element between two surface films."""
    if conductance <= 0.0:
        return 0.0
    return 1.0 / (1.0 / h_out + 1.0 / conductance + 1.0 / h_in)


class GlazingHeatBalance(HeatBalanceEngine):
    """
    Default heat balance engine.

    Parameters
    ----------
    max_iterations:
        Maximum number of iterations to update the linearized coefficients.
    tolerance:
        Maximum change of the face temperatures [K] between two iterations at
        convergence.
    edge_band:
        Width of the edge-of-glass zone along the frame [m].
    """

    def __init__(
        self,
        max_iterations: int = 50,
        tolerance: float = 1.e-3,
        edge_band: float = 0.0635
    ) -> None:
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.edge_band = edge_band

    @staticmethod
    def exterior_radiant_temperature(
        surface: Surface,
        T_out_air: float,
        mode: AnalysisMode
    ) -> float:
        """Returns the radiant temperature [K] of the exterior environment
        seen by the window. At rating conditions this is the outdoor air
        temperature."""
        T_out = T_out_air + 273.15
        if mode is AnalysisMode.ISOLATED:
            return T_out
        T_sky = surface.sky_temperature + 273.15
        F_sky = surface.view_factor_sky
        return (F_sky * T_sky ** 4 + (1.0 - F_sky) * T_out ** 4) ** 0.25

    def _solve_faces(
        self,
        glazings: list[GlazingLayer],
        gaps: list[GapLayer],
        theta: np.ndarray,
        S: list[float],
        h_o: float,
        h_i: float,
        T_out: float,
        T_rad_out: float,
        T_in: float,
        height: float,
        tilt: float
    ) -> tuple[np.ndarray, dict[str, float]]:
        n = 2 * len(glazings)
        A = np.zeros((n, n))
        b = np.zeros(n)
        # exterior surface film
        h_ro = radiative_coefficient(theta[0], T_rad_out, glazings[0].ir_emissivity_front)
        A[0, 0] -= h_o + h_ro
        b[0] -= h_o * T_out + h_ro * T_rad_out
        # interior surface film
        h_ri = radiative_coefficient(theta[-1], T_in, glazings[-1].ir_emissivity_back)
        A[-1, -1] -= h_i + h_ri
        b[-1] -= (h_i + h_ri) * T_in
        R_total = 1.0 / (h_o + h_ro) + 1.0 / (h_i + h_ri)
        # conduction through the panes and absorbed solar radiation
        for j, pane in enumerate(glazings):
            f, r = 2 * j, 2 * j + 1
            C = pane.conductivity / pane.thickness
            A[f, f] -= C
            A[f, r] += C
            A[r, r] -= C
            A[r, f] += C
            b[f] -= 0.5 * S[j]
            b[r] -= 0.5 * S[j]
            R_total += 1.0 / C
        # convection and radiation across the gaps
        for j, gap in enumerate(gaps):
            a, c = 2 * j + 1, 2 * j + 2
            h_c, h_r = gap_coefficients(
                gap, theta[a], theta[c],
                glazings[j].ir_emissivity_back,
                glazings[j + 1].ir_emissivity_front,
                height, tilt
            )
            h_gap = h_c + h_r
            A[a, a] -= h_gap
            A[a, c] += h_gap
            A[c, c] -= h_gap
            A[c, a] += h_gap
            R_total += 1.0 / h_gap
        theta_new = np.linalg.solve(A, b)
        coeffs = {'h_ro': h_ro, 'h_ri': h_ri, 'u_center': 1.0 / R_total}
        return theta_new, coeffs

    def evaluate(
        self,
        context: SimulationContext,
        surface: Surface,
        h_exterior: float,
        h_interior: float,
        T_in_guess: float,
        T_out_guess: float,
        T_in_air: float,
        T_out_air: float,
        mode: AnalysisMode
    ) -> HeatBalanceResult:
        glazings = context.glazings_of(surface)
        gaps = context.gaps_of(surface)
        n_faces = 2 * len(glazings)
        S = list(surface.absorbed_solar) + [0.0] * len(glazings)
        S = S[:len(glazings)]
        T_out = T_out_air + 273.15
        T_in = T_in_air + 273.15
        T_rad_out = self.exterior_radiant_temperature(surface, T_out_air, mode)
        theta = np.linspace(T_out_guess, T_in_guess, n_faces) + 273.15
        coeffs = {}
        for _ in range(self.max_iterations):
            theta_new, coeffs = self._solve_faces(
                glazings, gaps, theta, S, h_exterior, h_interior,
                T_out, T_rad_out, T_in, surface.height, surface.tilt
            )
            delta = float(np.max(np.abs(theta_new - theta)))
            theta = theta_new
            if delta < self.tolerance:
                break
        # heat flux into the zone through the center of glass
        q_cog = (
            (h_interior + coeffs['h_ri']) * (theta[-1] - T_in)
            + surface.transmitted_solar
        )
        fd = context.frame_divider_of(surface)
        geometry = WindowGeometry(
            surface.width, surface.height, fd, self.edge_band
        )
        u_center = coeffs['u_center']
        heat_gain = geometry.glazed_area * q_cog
        u_edge = u_center
        if fd is not None:
            u_edge = fd.edge_of_glass_u(u_center)
            heat_gain += geometry.edge_area * (u_edge - u_center) * (T_out - T_in)
            heat_gain += self._frame_divider_gain(
                fd, geometry, surface, h_exterior, h_interior, T_out, T_in
            )
        T_surf = theta - 273.15
        return HeatBalanceResult(
            T_in_surf=float(T_surf[-1]),
            T_out_surf=float(T_surf[0]),
            heat_gain=float(heat_gain),
            layer_absorption=tuple(S),
            u_center=u_center,
            u_edge=u_edge,
            face_temperatures=tuple(float(T) for T in T_surf)
        )

    @staticmethod
    def _frame_divider_gain(
        fd: FrameDividerSpec,
        geometry: WindowGeometry,
        surface: Surface,
        h_exterior: float,
        h_interior: float,
        T_out: float,
        T_in: float
    ) -> float:
        """Heat flow into the zone through frame and dividers [W]."""
        I = surface.beam_irradiance
        elements = [(
            geometry.frame_area, fd.frame_conductance,
            fd.frame_solar_absorptance, fd.frame_emissivity
        )]
        if fd.has_dividers:
            elements.append((
                geometry.divider_area, fd.divider_conductance,
                fd.divider_solar_absorptance, fd.divider_emissivity
            ))
        Q = 0.0
        for area, conductance, alpha, e in elements:
            h_out = h_exterior + radiative_coefficient(T_out, T_out, e)
            h_in = h_interior + radiative_coefficient(T_in, T_in, e)
            U = film_u_factor(h_out, h_in, conductance)
            Q += area * U * ((T_out - T_in) + alpha * I / h_out)
        return Q
