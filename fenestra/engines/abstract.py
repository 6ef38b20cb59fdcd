"""
Interfaces of the shared engines that perform the physics of a window
analysis. Each call gets the `AnalysisMode` under which it runs explicitly.
Temperatures passed to and returned by the engines are in °C, heat transfer
coefficients in W/(m².K).
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from fenestra.catalog.context import (
    SimulationContext,
    Surface,
    AnalysisMode,
    OpticalProperties
)


@dataclass(frozen=True)
class HeatBalanceResult:
    """
    Attributes
    ----------
    T_in_surf:
        Temperature of the interior glass surface [°C].
    T_out_surf:
        Temperature of the exterior glass surface [°C].
    heat_gain:
        Net heat flow from the window into the zone [W] (negative if the zone
        loses heat through the window).
    layer_absorption:
        Solar radiation absorbed by each pane [W/m²].
    u_center:
        Center-of-glass U-factor of the glazing under the current boundary
        conditions [W/(m².K)].
    u_edge:
        Edge-of-glass U-factor [W/(m².K)].
    face_temperatures:
        Temperatures of all glass faces from the exterior to the interior
        side [°C].
    """
    T_in_surf: float
    T_out_surf: float
    heat_gain: float
    layer_absorption: tuple[float, ...]
    u_center: float
    u_edge: float
    face_temperatures: tuple[float, ...] = ()


class HeatBalanceEngine(ABC):

    @abstractmethod
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
        """Solves the heat balance of the window with the given convection
        coefficients, starting from the given surface temperature guesses."""
        ...


class ConvectionEngine(ABC):

    @abstractmethod
    def natural_convection_coefficient(
        self,
        context: SimulationContext,
        surface: Surface,
        T_surf: float,
        T_air: float,
        mode: AnalysisMode
    ) -> float:
        """Returns the natural convection heat transfer coefficient between
        the surface and the adjacent air, based on the current tilt angle of
        the surface."""
        ...


class OpticalEngine(ABC):

    @abstractmethod
    def init_optical_coefficients(
        self,
        context: SimulationContext,
        construction_index: int,
        mode: AnalysisMode
    ) -> OpticalProperties:
        """Calculates the optical properties of the glazing system and stores
        them in the context under the name of the construction."""
        ...


class SolarDistributionEngine(ABC):

    @abstractmethod
    def init_solar_gains(
        self,
        context: SimulationContext,
        surface: Surface,
        irradiance: float,
        mode: AnalysisMode
    ) -> None:
        """Sets the incident solar irradiance on the surface."""
        ...

    @abstractmethod
    def distribute_interior_solar(
        self,
        context: SimulationContext,
        surface: Surface,
        mode: AnalysisMode
    ) -> None:
        """Splits the incident solar irradiance over the panes (absorbed) and
        the zone (transmitted)."""
        ...
