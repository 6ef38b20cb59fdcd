"""
Synthesis of a window construction (a stack of panes and gaps, and an
optional frame with dividers) from a set of target-independent parameters.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from fenestra import Quantity
from fenestra.logging import ModuleLogger
from fenestra.exceptions import ConstructionError
from fenestra.config import BuilderSettings
from fenestra.glazing import (
    Gas,
    GlazingLayer,
    GapLayer,
    ConstructionAssembly,
    FrameDividerSpec
)
from fenestra.catalog.context import WindowGeometry
from fenestra.catalog.property_database import PropertyDatabase, normalize_key

Q_ = Quantity
logger = ModuleLogger.get_logger(__name__)


@dataclass(frozen=True)
class WindowParameters:
    """
    Input vector of the construction builder.

    Attributes
    ----------
    fenestration_type:
        Product category that determines the rating size and tilt of the
        window (see `PropertyDatabase.fenestration_types`).
    number_of_panes:
        Number of glass panes (>= 1).
    glass_thickness:
        Thickness of each pane.
    coating:
        Coating of the glass: 'NONE' or 'LOW_E'. In a multi-pane window only
        the outermost pane is coated.
    tint:
        Tint of the glass: 'CLEAR', 'BRONZE', 'GRAY' or 'GREEN'.
    gas:
        Fill gas of the gaps.
    gap_thickness:
        Thickness of each gap.
    frame_material:
        Material of the frame (see the frame table of the property database).
    frame_width:
        Projected width of the frame. A window without frame has zero frame
        width.
    divider_width:
        Projected width of the dividers. Zero means no dividers.
    spacer_type:
        Type of spacer between the panes.
    dirt_factor:
        Transmittance factor of the outermost pane for dirt on the glass.
    """
    fenestration_type: str = 'HORIZONTAL_SLIDER'
    number_of_panes: int = 2
    glass_thickness: Quantity = Q_(3.0, 'mm')
    coating: str = 'NONE'
    tint: str = 'CLEAR'
    gas: Gas = Gas.AIR
    gap_thickness: Quantity = Q_(12.7, 'mm')
    frame_material: str = 'ALUMINUM_THERMAL_BREAK'
    frame_width: Quantity = Q_(0.0, 'm')
    divider_width: Quantity = Q_(0.0, 'm')
    spacer_type: str = 'ALUMINUM'
    dirt_factor: float = 1.0

    def key(self) -> tuple:
        """Returns a hashable key that identifies the parameter vector.
        A single pane window has no gaps: its gas, gap thickness and spacer do
        not enter the key."""
        gap = None
        if self.number_of_panes > 1:
            gap = (
                self.gas,
                round(self.gap_thickness.to('mm').m, 6),
                normalize_key(self.spacer_type)
            )
        return (
            normalize_key(self.fenestration_type),
            self.number_of_panes,
            round(self.glass_thickness.to('mm').m, 6),
            normalize_key(self.coating),
            normalize_key(self.tint),
            gap,
            normalize_key(self.frame_material),
            round(self.frame_width.to('mm').m, 6),
            round(self.divider_width.to('mm').m, 6),
            self.dirt_factor
        )

    def __str__(self):
        s = (
            f"{self.number_of_panes} pane(s), "
            f"{self.glass_thickness.to('mm'):~P.1f} {self.tint.lower()} glass"
        )
        if normalize_key(self.coating) != 'NONE':
            s += f" ({self.coating.lower()})"
        if self.number_of_panes > 1:
            s += (
                f", {self.gap_thickness.to('mm'):~P.1f} "
                f"{self.gas.value} gaps"
            )
        if self.frame_width.to('m').m > 0.0:
            s += (
                f", {self.frame_material.lower()} frame "
                f"{self.frame_width.to('mm'):~P.0f}"
            )
        return s


class ConstructionBuilder:
    """
    Builds the construction assembly and frame/divider of a window with the
    physical properties taken from a `PropertyDatabase`.

    Parameters
    ----------
    database:
        The property database.
    settings:
        Settings of the builder.
    """

    def __init__(
        self,
        database: PropertyDatabase,
        settings: BuilderSettings = BuilderSettings()
    ) -> None:
        self.database = database
        self.settings = settings

    def build(
        self,
        name: str,
        params: WindowParameters
    ) -> tuple[ConstructionAssembly, FrameDividerSpec | None]:
        """
        Returns the construction assembly and (if the frame width is not zero)
        the frame/divider of the window with the given parameters.

        Raises
        ------
        ConstructionError
            If the parameters are invalid.
        PropertyLookupError
            If the property database has no data for the parameters.
        """
        self._check(name, params)
        n = params.number_of_panes
        layers = []
        for i in range(n):
            # only the outermost pane gets the coating
            coating = params.coating if i == 0 or n == 1 else 'NONE'
            if i > 0:
                layers.append(GapLayer(
                    name=f"{name}:GAP{len(layers) + 1}",
                    thickness=params.gap_thickness.to('m').m,
                    gas=params.gas
                ))
            props = self.database.glazing(
                params.glass_thickness.to('m').m,
                coating,
                params.tint
            )
            layers.append(GlazingLayer(
                name=f"{name}:GLAZING{len(layers) + 1}",
                dirt_factor=params.dirt_factor if i == 0 else 1.0,
                **props
            ))
        assembly = ConstructionAssembly(name, tuple(layers))
        frame_divider = self._build_frame_divider(name, params)
        logger.debug(f"Built '{name}': {params}")
        return assembly, frame_divider

    @staticmethod
    def _check(name: str, params: WindowParameters) -> None:
        if params.number_of_panes < 1:
            raise ConstructionError(
                f"'{name}': the number of panes must be at least 1, got "
                f"{params.number_of_panes}"
            )
        if params.glass_thickness.to('m').m <= 0.0:
            raise ConstructionError(f"'{name}': glass thickness must be positive")
        if params.number_of_panes > 1 and params.gap_thickness.to('m').m <= 0.0:
            raise ConstructionError(f"'{name}': gap thickness must be positive")
        if params.frame_width.to('m').m < 0.0 or params.divider_width.to('m').m < 0.0:
            raise ConstructionError(
                f"'{name}': frame and divider width cannot be negative"
            )

    def _build_frame_divider(
        self,
        name: str,
        params: WindowParameters
    ) -> FrameDividerSpec | None:
        frame_width = params.frame_width.to('m').m
        if frame_width <= 0.0:
            return None
        n = params.number_of_panes
        frame = self.database.frame(params.frame_material, n)
        spacer_coeffs = (0.0, 1.0, 0.0)
        if n > 1:
            spacer_coeffs = self.database.spacer(params.spacer_type, n)
        width, height, _ = self.database.fenestration_type(params.fenestration_type)
        divider_width = params.divider_width.to('m').m
        n_h = n_v = 0
        if divider_width > 0.0:
            spacing = self.settings.max_divider_spacing.to('m').m
            n_h = math.ceil(round(height / spacing, 9))
            n_v = math.ceil(round(width / spacing, 9))
        return FrameDividerSpec(
            name=f"{name}:FRAME",
            frame_width=frame_width,
            frame_conductance=frame['conductance'],
            frame_solar_absorptance=frame['solar_absorptance'],
            frame_visible_absorptance=frame['visible_absorptance'],
            frame_emissivity=frame['emissivity'],
            divider_width=divider_width,
            horizontal_dividers=n_h,
            vertical_dividers=n_v,
            divider_conductance=frame['conductance'] if n_h or n_v else 0.0,
            divider_solar_absorptance=frame['solar_absorptance'] if n_h or n_v else 0.0,
            divider_visible_absorptance=frame['visible_absorptance'] if n_h or n_v else 0.0,
            divider_emissivity=frame['emissivity'],
            spacer_coeffs=spacer_coeffs,
            number_of_panes=n
        )

    def geometry(
        self,
        params: WindowParameters,
        frame_divider: FrameDividerSpec | None = None
    ) -> tuple[WindowGeometry, float]:
        """Returns the geometry of the window at its rating size and the tilt
        angle [deg] of the fenestration type."""
        width, height, tilt = self.database.fenestration_type(params.fenestration_type)
        geometry = WindowGeometry(
            width, height, frame_divider,
            self.settings.edge_band.to('m').m
        )
        return geometry, tilt
