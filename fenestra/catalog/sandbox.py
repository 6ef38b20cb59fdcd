"""
Scoped acquisition of the host catalogs for the isolated analysis of a single
window.

On entering the sandbox, the catalogs of the `SimulationContext` are saved in
a `SimulationSnapshot` and replaced by a scratch model that consists of one
window surface (its own base surface) in one zone. On exit, the catalogs are
restored from the snapshot and the matched construction is appended to them.
"""
from __future__ import annotations
import hashlib
import pickle
from dataclasses import dataclass
from fenestra.logging import ModuleLogger
from fenestra.exceptions import SandboxError, SandboxRestoreError
from fenestra.glazing import ConstructionAssembly, FrameDividerSpec
from .context import (
    SimulationContext,
    AnalysisMode,
    Construction,
    Surface,
    Zone
)

logger = ModuleLogger.get_logger(__name__)

# Per-surface report variables of the scratch model.
REPORT_VARIABLES = (
    'window_heat_gain',
    'window_transmitted_solar',
    'window_inside_surface_temperature',
    'window_outside_surface_temperature'
)


@dataclass
class SimulationSnapshot:
    """The host catalogs taken over on entering the sandbox, together with a
    digest of their serialized contents. The catalog objects themselves are
    kept, so references held by the host stay valid after the restore."""
    materials: list
    nominal_R_materials: list
    constructions: list
    nominal_R: list
    nominal_U: list
    frame_dividers: list
    spectral_data: list
    optics: dict
    surfaces: list
    zones: list
    report_arrays: dict
    mode: AnalysisMode
    digest: str = ''

    CATALOGS = (
        'materials', 'nominal_R_materials', 'constructions', 'nominal_R',
        'nominal_U', 'frame_dividers', 'spectral_data', 'optics', 'surfaces',
        'zones', 'report_arrays'
    )

    @classmethod
    def capture(cls, context: SimulationContext) -> SimulationSnapshot:
        catalogs = tuple(getattr(context, c) for c in cls.CATALOGS)
        snapshot = cls(*catalogs, mode=context.mode)
        snapshot.digest = snapshot.compute_digest()
        return snapshot

    def compute_digest(self) -> str:
        data = pickle.dumps(
            tuple(getattr(self, c) for c in self.CATALOGS),
            protocol=pickle.HIGHEST_PROTOCOL
        )
        return hashlib.sha256(data).hexdigest()

    def restore(self, context: SimulationContext) -> None:
        if self.compute_digest() != self.digest:
            raise SandboxRestoreError(
                "the snapshot of the host catalogs was modified while the "
                "sandbox was active"
            )
        for c in self.CATALOGS:
            setattr(context, c, getattr(self, c))
        context.mode = self.mode


class CatalogSandbox:
    """
    Gives exclusive access to the catalogs of a `SimulationContext` for the
    analysis of a single window.

    The sandbox is used as a context manager. Leaving the `with`-block
    always restores the host catalogs, also when an exception is raised. To
    merge the matched construction into the host catalogs, call `exit()`
    with the construction before leaving the block.

    Parameters
    ----------
    context:
        The simulation context whose catalogs are taken over.
    name:
        Name of the construction being analyzed.
    width, height:
        Dimensions of the glazed part of the window [m].
    tilt:
        Tilt angle of the window [deg].
    """

    def __init__(
        self,
        context: SimulationContext,
        name: str,
        width: float,
        height: float,
        tilt: float = 90.0
    ) -> None:
        self.context = context
        self.name = name
        self.width = width
        self.height = height
        self.tilt = tilt
        self._snapshot: SimulationSnapshot | None = None

    @property
    def active(self) -> bool:
        return self._snapshot is not None

    def enter(self) -> SimulationContext:
        """Saves the host catalogs and replaces them by the scratch model.
        Returns the context, which now holds the scratch model.
        """
        if self.active:
            raise SandboxError(f"sandbox '{self.name}' was already entered")
        if self.context.isolated_analysis:
            raise SandboxError(
                "another isolated analysis is using the simulation context"
            )
        self._snapshot = SimulationSnapshot.capture(self.context)
        self._create_scratch_model()
        self.context.mode = AnalysisMode.ISOLATED
        logger.debug(
            f"Entered sandbox for '{self.name}' "
            f"({len(self._snapshot.materials)} materials, "
            f"{len(self._snapshot.constructions)} constructions saved)"
        )
        return self.context

    def _create_scratch_model(self) -> None:
        ctx = self.context
        ctx.materials = []
        ctx.nominal_R_materials = []
        ctx.constructions = []
        ctx.nominal_R = []
        ctx.nominal_U = []
        ctx.frame_dividers = []
        ctx.spectral_data = []
        ctx.optics = {}
        ctx.zones = [Zone(name=f"{self.name}:Zone")]
        ctx.surfaces = [
            Surface(
                name=f"{self.name}:Surface",
                width=self.width,
                height=self.height,
                tilt=self.tilt,
                zone=0,
                base_surface=0
            )
        ]
        ctx.report_arrays = {var: [0.0] for var in REPORT_VARIABLES}

    def install(
        self,
        assembly: ConstructionAssembly,
        frame_divider: FrameDividerSpec | None = None,
        width: float | None = None,
        height: float | None = None,
        tilt: float | None = None
    ) -> Surface:
        """Installs the construction (and frame/divider) on the scratch
        surface, replacing any construction installed before. Per-layer
        arrays of the surface are sized to the number of panes. If `width`,
        `height` or `tilt` is given, the scratch surface is resized to it.
        """
        if not self.active:
            raise SandboxError(f"sandbox '{self.name}' is not active")
        ctx = self.context
        ctx.materials = []
        ctx.nominal_R_materials = []
        ctx.constructions = []
        ctx.nominal_R = []
        ctx.nominal_U = []
        ctx.frame_dividers = []
        ctx.optics = {}
        indices = tuple(ctx.add_material(layer) for layer in assembly.layers)
        fd_index = None
        if frame_divider is not None:
            fd_index = ctx.add_frame_divider(frame_divider)
        ctx.add_construction(
            Construction(
                name=assembly.name,
                layer_indices=indices,
                is_window=True,
                frame_divider_index=fd_index
            )
        )
        surface = ctx.surface
        if width is not None:
            surface.width = width
        if height is not None:
            surface.height = height
        if tilt is not None:
            surface.tilt = tilt
        surface.construction = 0
        surface.frame_divider = fd_index
        surface.absorbed_solar = [0.0] * assembly.number_of_panes
        surface.transmitted_solar = 0.0
        return surface

    def exit(
        self,
        assembly: ConstructionAssembly | None = None,
        frame_divider: FrameDividerSpec | None = None,
        nominal_U: float = 0.0
    ) -> int | None:
        """
        Restores the host catalogs. If `assembly` is given, its materials,
        the construction and the frame/divider (if any) are appended to the
        restored catalogs.

        Returns
        -------
        The index of the new construction in the construction catalog, or
        None if no assembly was given.

        Raises
        ------
        SandboxRestoreError
            If the saved catalogs were corrupted while the sandbox was active.
        """
        if not self.active:
            raise SandboxError(f"sandbox '{self.name}' is not active")
        optics = self.context.optics.get(assembly.name) if assembly else None
        snapshot, self._snapshot = self._snapshot, None
        try:
            snapshot.restore(self.context)
        except SandboxRestoreError:
            logger.error(
                f"Restoring the host catalogs after analyzing '{self.name}' "
                f"failed"
            )
            raise
        logger.debug(f"Left sandbox for '{self.name}'")
        if assembly is None:
            return None
        return self._merge(assembly, frame_divider, nominal_U, optics)

    def _merge(
        self,
        assembly: ConstructionAssembly,
        frame_divider: FrameDividerSpec | None,
        nominal_U: float,
        optics
    ) -> int:
        ctx = self.context
        layers = list(assembly.layers)
        # The dirt on the outer pane is folded into its transmittance.
        layers[0] = layers[0].apply_dirt_factor()
        first = ctx.total_materials
        for layer in layers:
            ctx.add_material(layer)
        layer_indices = tuple(first + i for i in range(len(layers)))
        fd_index = None
        if frame_divider is not None:
            fd_index = ctx.add_frame_divider(frame_divider)
        index = ctx.add_construction(
            Construction(
                name=assembly.name,
                layer_indices=layer_indices,
                is_window=True,
                frame_divider_index=fd_index
            ),
            nominal_U=nominal_U
        )
        if optics is not None:
            ctx.optics[assembly.name] = optics
        logger.debug(
            f"Merged construction '{assembly.name}' at index {index} "
            f"(materials {layer_indices[0]}..{layer_indices[-1]})"
        )
        return index

    def __enter__(self) -> CatalogSandbox:
        self.enter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.active:
            self.exit()
