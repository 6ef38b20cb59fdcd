"""
The catalogs of the host simulation, grouped in one `SimulationContext`
object that is passed by reference to every component that reads or writes
them.

All records hold plain floats in SI-units (lengths in m, temperatures in °C,
tilt angles in degrees) so that they can be copied and pickled exactly.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from math import cos, radians
from fenestra.glazing import GlazingLayer, GapLayer, FrameDividerSpec


class AnalysisMode(Enum):
    """Operating mode of the shared engines.

    - KICKOFF: first pass of the host simulation (one-time initializations
      still need to run).
    - NORMAL: regular simulation of the host building model.
    - ISOLATED: sandboxed analysis of a single window at rating conditions.
    """
    KICKOFF = 'kickoff'
    NORMAL = 'normal'
    ISOLATED = 'isolated'


@dataclass(frozen=True)
class OpaqueMaterial:
    name: str
    thickness: float
    conductivity: float
    density: float = 0.0
    specific_heat: float = 0.0

    @property
    def nominal_R(self) -> float:
        return self.thickness / self.conductivity


MaterialRecord = GlazingLayer | GapLayer | OpaqueMaterial


@dataclass(frozen=True)
class SpectralDataRecord:
    """Spectral optical data of a glazing material (transmittance and
    reflectance as function of wavelength in µm)."""
    name: str
    wavelengths: tuple[float, ...]
    transmittance: tuple[float, ...]
    reflectance_front: tuple[float, ...]
    reflectance_back: tuple[float, ...]


@dataclass(frozen=True)
class Construction:
    """
    Construction record of the host catalog.

    Attributes
    ----------
    name:
        Name of the construction.
    layer_indices:
        Indices of the layer materials in the material catalog, ordered from
        the exterior to the interior side.
    is_window:
        True if the construction is a glazing system.
    frame_divider_index:
        Index of the frame/divider record in the frame/divider catalog, or
        None if the window has no frame.
    """
    name: str
    layer_indices: tuple[int, ...]
    is_window: bool = False
    frame_divider_index: int | None = None


@dataclass(frozen=True)
class OpticalProperties:
    """Optical properties of a glazing system at normal incidence.

    Attributes
    ----------
    solar_transmittance:
        Solar transmittance of the glazing system.
    solar_reflectance_front:
        Solar reflectance of the glazing system for radiation incident on the
        exterior side.
    layer_absorptance:
        Solar absorptance of each pane for radiation incident on the exterior
        side, from the exterior to the interior pane.
    visible_transmittance:
        Visible transmittance of the glazing system.
    """
    solar_transmittance: float
    solar_reflectance_front: float
    layer_absorptance: tuple[float, ...]
    visible_transmittance: float


@dataclass
class Zone:
    name: str
    air_temperature: float = 23.0
    first_surface: int = 0
    last_surface: int = 0


@dataclass
class Surface:
    """
    Heat transfer surface. In a sandboxed analysis, the only surface is a
    window that acts as its own base surface.

    Attributes
    ----------
    name:
        Name of the surface.
    construction:
        Index of the construction in the construction catalog.
    width, height:
        Dimensions of the glazed part of the window [m].
    tilt:
        Tilt angle with respect to the horizontal plane [deg]: 0° faces
        upwards, 90° is vertical, 180° faces downwards.
    zone:
        Index of the zone the surface belongs to.
    base_surface:
        Index of the base surface.
    frame_divider:
        Index of the frame/divider record, or None.
    outdoor_temperature:
        Outdoor air temperature [°C].
    sky_temperature:
        Sky temperature [°C], only used outside a sandboxed analysis.
    beam_irradiance:
        Solar irradiance incident on the surface [W/m²].
    sun_is_up:
        True if the incident irradiance is greater than zero.
    absorbed_solar:
        Solar radiation absorbed by each pane [W/m²].
    transmitted_solar:
        Solar radiation transmitted through the glazing [W/m²].
    """
    name: str
    construction: int = 0
    width: float = 1.0
    height: float = 1.0
    tilt: float = 90.0
    zone: int = 0
    base_surface: int = 0
    frame_divider: int | None = None
    outdoor_temperature: float = 0.0
    sky_temperature: float = 0.0
    beam_irradiance: float = 0.0
    sun_is_up: bool = False
    absorbed_solar: list[float] = field(default_factory=list)
    transmitted_solar: float = 0.0

    @property
    def view_factor_sky(self) -> float:
        return 0.5 * (1.0 + cos(radians(self.tilt)))

    @property
    def view_factor_ground(self) -> float:
        return 1.0 - self.view_factor_sky

    @property
    def area(self) -> float:
        return self.width * self.height


class SimulationContext:
    """
    The catalogs of the host simulation that the shared heat balance and
    optics engines read and write.

    Parallel lists are kept per catalog: `nominal_R_materials` holds the
    nominal resistance of each material, `nominal_R` and `nominal_U` the
    nominal resistance and U-factor of each construction. `report_arrays`
    maps the name of a per-surface report variable to its list of values.
    """

    def __init__(self):
        self.materials: list[MaterialRecord] = []
        self.nominal_R_materials: list[float] = []
        self.constructions: list[Construction] = []
        self.nominal_R: list[float] = []
        self.nominal_U: list[float] = []
        self.frame_dividers: list[FrameDividerSpec] = []
        self.spectral_data: list[SpectralDataRecord] = []
        self.optics: dict[str, OpticalProperties] = {}
        self.surfaces: list[Surface] = []
        self.zones: list[Zone] = []
        self.report_arrays: dict[str, list[float]] = {}
        self.mode: AnalysisMode = AnalysisMode.KICKOFF

    @property
    def isolated_analysis(self) -> bool:
        return self.mode is AnalysisMode.ISOLATED

    @property
    def kickoff(self) -> bool:
        return self.mode is AnalysisMode.KICKOFF

    @property
    def total_materials(self) -> int:
        return len(self.materials)

    @property
    def total_constructions(self) -> int:
        return len(self.constructions)

    @property
    def total_frame_dividers(self) -> int:
        return len(self.frame_dividers)

    def add_material(self, material: MaterialRecord) -> int:
        """Appends a material to the material catalog and returns its index."""
        self.materials.append(material)
        self.nominal_R_materials.append(material.nominal_R)
        return len(self.materials) - 1

    def add_construction(
        self,
        construction: Construction,
        nominal_R: float | None = None,
        nominal_U: float = 0.0
    ) -> int:
        """Appends a construction to the construction catalog and returns its
        index. If `nominal_R` is None, it is summed from the nominal
        resistances of the layer materials.
        """
        if nominal_R is None:
            nominal_R = sum(
                self.nominal_R_materials[i]
                for i in construction.layer_indices
            )
        self.constructions.append(construction)
        self.nominal_R.append(nominal_R)
        self.nominal_U.append(nominal_U)
        return len(self.constructions) - 1

    def add_frame_divider(self, frame_divider: FrameDividerSpec) -> int:
        self.frame_dividers.append(frame_divider)
        return len(self.frame_dividers) - 1

    def find_construction(self, name: str) -> int | None:
        """Returns the index of the construction with the given name
        (case-insensitive), or None.
        """
        for i, construction in enumerate(self.constructions):
            if construction.name.upper() == name.upper():
                return i
        return None

    @property
    def surface(self) -> Surface:
        """The first surface of the model (the window under analysis in a
        sandboxed run)."""
        return self.surfaces[0]

    @property
    def zone(self) -> Zone:
        return self.zones[0]

    def construction_of(self, surface: Surface) -> Construction:
        return self.constructions[surface.construction]

    def glazings_of(self, surface: Surface) -> list[GlazingLayer]:
        construction = self.construction_of(surface)
        return [
            self.materials[i] for i in construction.layer_indices[0::2]
        ]

    def gaps_of(self, surface: Surface) -> list[GapLayer]:
        construction = self.construction_of(surface)
        return [
            self.materials[i] for i in construction.layer_indices[1::2]
        ]

    def frame_divider_of(self, surface: Surface) -> FrameDividerSpec | None:
        if surface.frame_divider is None:
            return None
        return self.frame_dividers[surface.frame_divider]

    def optics_of(self, surface: Surface) -> OpticalProperties:
        return self.optics[self.construction_of(surface).name]


@dataclass(frozen=True)
class WindowGeometry:
    """
    Projected areas of a window with an optional frame and dividers [m²].
    The frame surrounds the glazed width x height of the surface.
    """
    width: float
    height: float
    frame_divider: FrameDividerSpec | None = None
    edge_band: float = 0.0635

    @property
    def frame_width(self) -> float:
        fd = self.frame_divider
        return fd.frame_width if fd is not None else 0.0

    @property
    def fenestration_area(self) -> float:
        fw = self.frame_width
        return (self.width + 2 * fw) * (self.height + 2 * fw)

    @property
    def frame_area(self) -> float:
        return self.fenestration_area - self.width * self.height

    @property
    def divider_area(self) -> float:
        fd = self.frame_divider
        if fd is None or not fd.has_dividers:
            return 0.0
        dw = fd.divider_width
        n_h = fd.horizontal_dividers
        n_v = fd.vertical_dividers
        A = dw * (n_h * self.width + n_v * self.height) - n_h * n_v * dw ** 2
        return min(A, self.width * self.height)

    @property
    def glazed_area(self) -> float:
        return self.width * self.height - self.divider_area

    @property
    def edge_area(self) -> float:
        """Area of the edge-of-glass band along the frame."""
        if self.frame_width <= 0.0:
            return 0.0
        b = self.edge_band
        inner_w = max(self.width - 2 * b, 0.0)
        inner_h = max(self.height - 2 * b, 0.0)
        A_edge = self.width * self.height - inner_w * inner_h
        return min(A_edge, self.glazed_area)

    @property
    def glazing_fraction(self) -> float:
        return self.glazed_area / self.fenestration_area
