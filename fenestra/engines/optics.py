"""
Single-band optical calculation of a multi-pane glazing system at normal
incidence.

The glazing system is built up pane by pane. For a stack of panes the
transmittance T and the front and back reflectances Rf and Rb follow from
the properties (tau, rho_f, rho_b) of the individual panes by accounting for
the multiple reflections between them:

    T(1..j)  = T(1..j-1) * tau_j / (1 - Rb(1..j-1) * rho_f_j)
    Rf(1..j) = Rf(1..j-1) + T(1..j-1) ** 2 * rho_f_j / (1 - Rb(1..j-1) * rho_f_j)
    Rb(1..j) = rho_b_j + tau_j ** 2 * Rb(1..j-1) / (1 - Rb(1..j-1) * rho_f_j)
"""
from __future__ import annotations
from dataclasses import dataclass
from fenestra.logging import ModuleLogger
from fenestra.glazing import GlazingLayer
from fenestra.catalog.context import (
    SimulationContext,
    AnalysisMode,
    OpticalProperties
)
from .abstract import OpticalEngine

logger = ModuleLogger.get_logger(__name__)


@dataclass(frozen=True)
class _Pane:
    tau: float
    rho_f: float
    rho_b: float


@dataclass(frozen=True)
class _Stack:
    T: float = 1.0
    Rf: float = 0.0
    Rb: float = 0.0

    def add(self, pane: _Pane) -> _Stack:
        d = 1.0 - self.Rb * pane.rho_f
        return _Stack(
            T=self.T * pane.tau / d,
            Rf=self.Rf + self.T ** 2 * pane.rho_f / d,
            Rb=pane.rho_b + pane.tau ** 2 * self.Rb / d
        )


def _build(panes: list[_Pane]) -> _Stack:
    stack = _Stack()
    for pane in panes:
        stack = stack.add(pane)
    return stack


def system_properties(panes: list[_Pane]) -> tuple[float, float]:
    """Returns the transmittance and front reflectance of the system."""
    stack = _build(panes)
    return stack.T, stack.Rf


def layer_absorptances(panes: list[_Pane]) -> list[float]:
    """
    Returns the fraction of the radiation incident on the exterior side that
    is absorbed in each pane.

    For pane j, the forward flux incident on its front side is
    f = T(1..j-1) / (1 - Rb(1..j-1) * Rf(j..N)). The flux leaving pane j
    towards the interior is g = tau_j * f / (1 - rho_b_j * Rf(j+1..N)) and
    the backward flux incident on its back side is b = Rf(j+1..N) * g.
    """
    n = len(panes)
    absorptances = []
    for j in range(n):
        left = _build(panes[:j])
        right_incl = _build(panes[j:])
        right_excl = _build(panes[j + 1:])
        pane = panes[j]
        f = left.T / (1.0 - left.Rb * right_incl.Rf)
        g = pane.tau * f / (1.0 - pane.rho_b * right_excl.Rf)
        b = right_excl.Rf * g
        alpha_f = 1.0 - pane.tau - pane.rho_f
        alpha_b = 1.0 - pane.tau - pane.rho_b
        absorptances.append(alpha_f * f + alpha_b * b)
    return absorptances


class MultilayerOptics(OpticalEngine):
    """Default optical engine. The dirt factor of the outermost pane
    reduces its solar and visible transmittance."""

    def init_optical_coefficients(
        self,
        context: SimulationContext,
        construction_index: int,
        mode: AnalysisMode
    ) -> OpticalProperties:
        construction = context.constructions[construction_index]
        glazings: list[GlazingLayer] = [
            context.materials[i] for i in construction.layer_indices[0::2]
        ]
        glazings[0] = glazings[0].apply_dirt_factor()
        solar = [
            _Pane(g.solar_transmittance, g.solar_reflectance_front, g.solar_reflectance_back)
            for g in glazings
        ]
        visible = [
            _Pane(g.visible_transmittance, g.visible_reflectance_front, g.visible_reflectance_back)
            for g in glazings
        ]
        tau_sol, rho_sol = system_properties(solar)
        tau_vis, _ = system_properties(visible)
        optics = OpticalProperties(
            solar_transmittance=tau_sol,
            solar_reflectance_front=rho_sol,
            layer_absorptance=tuple(layer_absorptances(solar)),
            visible_transmittance=tau_vis
        )
        context.optics[construction.name] = optics
        logger.debug(
            f"Optics of '{construction.name}' ({mode.value}): "
            f"tau_sol = {tau_sol:.4f}, rho_sol = {rho_sol:.4f}, "
            f"tau_vis = {tau_vis:.4f}"
        )
        return optics
