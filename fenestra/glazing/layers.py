from __future__ import annotations
from dataclasses import dataclass, replace
from fenestra.exceptions import ConstructionError
from .gases import Gas, GasProperties


@dataclass(frozen=True)
class GlazingLayer:
    """
    Immutable set of optical and thermal properties of a single glass pane.
    All values are in SI-units.

    Attributes
    ----------
    name:
        Name of the glazing material.
    thickness:
        Thickness of the pane [m].
    solar_transmittance:
        Solar transmittance at normal incidence.
    solar_reflectance_front, solar_reflectance_back:
        Solar reflectance at normal incidence of the front (exterior) side
        and back (interior) side.
    visible_transmittance:
        Visible transmittance at normal incidence.
    visible_reflectance_front, visible_reflectance_back:
        Visible reflectance at normal incidence of the front and back side.
    ir_transmittance:
        Long-wave (infrared) transmittance.
    ir_emissivity_front, ir_emissivity_back:
        Long-wave hemispherical absorptance (emissivity) of the front and back
        side.
    conductivity:
        Thermal conductivity of the glass [W / (m.K)].
    youngs_modulus:
        Elastic modulus of the glass [Pa].
    poissons_ratio:
        Poisson ratio of the glass.
    dirt_factor:
        Factor applied to the transmittance of the outermost pane to account
        for dirt on the glass. A value of exactly 0 means "not specified" and
        is handled as 1.
    """
    name: str
    thickness: float
    solar_transmittance: float
    solar_reflectance_front: float
    solar_reflectance_back: float
    visible_transmittance: float
    visible_reflectance_front: float
    visible_reflectance_back: float
    ir_transmittance: float
    ir_emissivity_front: float
    ir_emissivity_back: float
    conductivity: float
    youngs_modulus: float = 7.2e10
    poissons_ratio: float = 0.22
    dirt_factor: float = 1.0

    @property
    def effective_dirt_factor(self) -> float:
        if self.dirt_factor == 0.0:
            return 1.0
        return self.dirt_factor

    @property
    def solar_absorptance_front(self) -> float:
        return 1.0 - self.solar_transmittance - self.solar_reflectance_front

    @property
    def solar_absorptance_back(self) -> float:
        return 1.0 - self.solar_transmittance - self.solar_reflectance_back

    @property
    def nominal_R(self) -> float:
        """Conduction resistance of the pane [m².K/W]."""
        return self.thickness / self.conductivity

    def apply_dirt_factor(self) -> GlazingLayer:
        """Returns a copy of the pane with the dirt factor folded into its
        solar and visible transmittance. The dirt factor of the copy is reset
        to 1.
        """
        d = self.effective_dirt_factor
        return replace(
            self,
            solar_transmittance=self.solar_transmittance * d,
            visible_transmittance=self.visible_transmittance * d,
            dirt_factor=1.0
        )

    def __str__(self):
        l1 = f"Glazing '{self.name}'\n"
        l2 = f"\tt: {self.thickness * 1e3:.1f} mm\n"
        l3 = f"\ttau_sol: {self.solar_transmittance:.3f}\n"
        l4 = f"\ttau_vis: {self.visible_transmittance:.3f}\n"
        l5 = (
            f"\temissivity: {self.ir_emissivity_front:.2f} (front), "
            f"{self.ir_emissivity_back:.2f} (back)\n"
        )
        return l1 + l2 + l3 + l4 + l5


@dataclass(frozen=True)
class GapLayer:
    """
    Gas-filled space between two panes.

    Attributes
    ----------
    name:
        Name of the gap material.
    thickness:
        Distance between the panes [m].
    gas:
        The single fill gas of the gap.
    """
    name: str
    thickness: float
    gas: Gas = Gas.AIR

    @property
    def properties(self) -> GasProperties:
        return self.gas.properties

    @property
    def molar_weight(self) -> float:
        return self.properties.molar_weight

    @property
    def nominal_R(self) -> float:
        """Conduction resistance of the still gas at 300 K [m².K/W]."""
        return self.thickness / self.properties.k(300.0)

    def __str__(self):
        l1 = f"Gap '{self.name}'\n"
        l2 = f"\tt: {self.thickness * 1e3:.1f} mm\n"
        l3 = f"\tgas: {self.gas.value}\n"
        return l1 + l2 + l3


Layer = GlazingLayer | GapLayer


@dataclass(frozen=True)
class ConstructionAssembly:
    """
    Glazing system composed of panes and gaps ordered from the exterior to
    the interior side. The stack always starts and ends with a pane, and panes
    and gaps alternate.
    """
    name: str
    layers: tuple[Layer, ...]

    def __post_init__(self):
        n = len(self.layers)
        if n == 0 or n % 2 == 0:
            raise ConstructionError(
                f"construction '{self.name}' must have an odd number of "
                f"layers, got {n}"
            )
        for i, layer in enumerate(self.layers):
            expected = GlazingLayer if i % 2 == 0 else GapLayer
            if not isinstance(layer, expected):
                raise ConstructionError(
                    f"layer {i + 1} of construction '{self.name}' must be a "
                    f"{expected.__name__}, got {type(layer).__name__}"
                )

    @property
    def glazings(self) -> tuple[GlazingLayer, ...]:
        return self.layers[0::2]

    @property
    def gaps(self) -> tuple[GapLayer, ...]:
        return self.layers[1::2]

    @property
    def number_of_panes(self) -> int:
        return (len(self.layers) + 1) // 2

    @property
    def nominal_R(self) -> float:
        """Sum of the nominal resistances of the layers (without surface
        films) [m².K/W].
        """
        return sum(layer.nominal_R for layer in self.layers)

    @property
    def thickness(self) -> float:
        return sum(layer.thickness for layer in self.layers)

    def __str__(self):
        _str = f'Construction assembly: {self.name}\n'
        _str += '-' * len(_str[:-1]) + '\n'
        for layer_str in (str(layer) for layer in self.layers):
            _str += layer_str
        return _str


@dataclass(frozen=True)
class FrameDividerSpec:
    """
    Frame and divider of a window.

    Conductances are surface-to-surface values [W/(m².K)]; widths are
    projected widths [m]. The edge ratio is the ratio of the edge-of-glass to
    the center-of-glass conductance. Before the construction is matched, it is
    derived from the spacer coefficients (see `edge_ratio()`); the published
    record holds the value at the rating condition in `frame_edge_ratio`.
    """
    name: str
    frame_width: float
    frame_conductance: float
    frame_solar_absorptance: float
    frame_visible_absorptance: float
    frame_emissivity: float
    divider_width: float = 0.0
    horizontal_dividers: int = 0
    vertical_dividers: int = 0
    divider_conductance: float = 0.0
    divider_solar_absorptance: float = 0.0
    divider_visible_absorptance: float = 0.0
    divider_emissivity: float = 0.9
    frame_edge_ratio: float = 1.0
    divider_edge_ratio: float = 1.0
    spacer_coeffs: tuple[float, float, float] = (0.0, 1.0, 0.0)
    number_of_panes: int = 1

    def edge_of_glass_u(self, u_center: float) -> float:
        """Returns the edge-of-glass U-factor that corresponds with the
        center-of-glass U-factor `u_center` [W/(m².K)].
        """
        if self.number_of_panes == 1:
            return u_center
        a, b, c = self.spacer_coeffs
        return a + b * u_center + c * u_center ** 2

    def edge_ratio(self, u_center: float) -> float:
        if u_center <= 0.0:
            return 1.0
        return self.edge_of_glass_u(u_center) / u_center

    def with_edge_ratio(self, u_center: float) -> FrameDividerSpec:
        ratio = self.edge_ratio(u_center)
        divider_ratio = ratio if self.divider_width > 0.0 else 1.0
        return replace(
            self,
            frame_edge_ratio=ratio,
            divider_edge_ratio=divider_ratio
        )

    @property
    def has_dividers(self) -> bool:
        return self.divider_width > 0.0 and (
            self.horizontal_dividers > 0 or self.vertical_dividers > 0
        )
