"""
Pytest configuration and fixtures
"""
import pytest

from fenestra.catalog import (
    SimulationContext,
    CatalogSandbox,
    PropertyDatabase,
    OpaqueMaterial,
    Construction,
    Surface,
    Zone
)
from fenestra.engines import (
    Engines,
    HeatBalanceEngine,
    HeatBalanceResult,
    ConvectionEngine,
    MultilayerOptics,
    SolarDistributionEngine
)
from fenestra.glazing import FrameDividerSpec
from fenestra.rating import ConstructionBuilder, WindowParameters


@pytest.fixture(scope="session")
def database() -> PropertyDatabase:
    """Property database with the tables shipped with the package"""
    return PropertyDatabase.load()


@pytest.fixture
def builder(database) -> ConstructionBuilder:
    return ConstructionBuilder(database)


@pytest.fixture
def host_context() -> SimulationContext:
    """A host model with a wall construction, a frame and one zone"""
    ctx = SimulationContext()
    brick = ctx.add_material(OpaqueMaterial('BRICK', 0.1, 0.9, 1900.0, 840.0))
    insulation = ctx.add_material(OpaqueMaterial('MINERAL WOOL', 0.12, 0.035, 30.0, 1030.0))
    ctx.add_construction(Construction('EXTERIOR WALL', (brick, insulation)))
    ctx.add_frame_divider(FrameDividerSpec(
        name='HOST FRAME',
        frame_width=0.05,
        frame_conductance=5.0,
        frame_solar_absorptance=0.7,
        frame_visible_absorptance=0.7,
        frame_emissivity=0.9
    ))
    ctx.zones = [Zone('LIVING ROOM', 21.0, 0, 0)]
    ctx.surfaces = [Surface('SOUTH WALL', construction=0, width=4.0, height=2.7)]
    ctx.report_arrays = {'surface_heat_gain': [12.5]}
    return ctx


def install(
    context: SimulationContext,
    builder: ConstructionBuilder,
    params: WindowParameters = WindowParameters(),
    name: str = 'TEST WINDOW',
    tilt: float = 90.0
) -> CatalogSandbox:
    """Enters a sandbox and installs the window with the given parameters"""
    width, height, _ = builder.database.fenestration_type(params.fenestration_type)
    sandbox = CatalogSandbox(context, name, width, height, tilt)
    sandbox.enter()
    assembly, frame_divider = builder.build(name, params)
    sandbox.install(assembly, frame_divider)
    MultilayerOptics().init_optical_coefficients(context, 0, context.mode)
    return sandbox


@pytest.fixture
def make_sandbox(host_context, builder):
    """Factory of active sandboxes on the host context with a window
    installed; sandboxes still active at teardown are left"""
    sandboxes = []

    def _make(params: WindowParameters = WindowParameters(), tilt: float = 90.0):
        sandbox = install(host_context, builder, params, tilt=tilt)
        sandboxes.append(sandbox)
        return sandbox

    yield _make
    for sandbox in sandboxes:
        if sandbox.active:
            sandbox.exit()


@pytest.fixture
def sandbox(make_sandbox):
    return make_sandbox()


class ConstantConvection(ConvectionEngine):
    """Returns a fixed coefficient and records the tilt angle of each call"""

    def __init__(self, h: float = 3.0):
        self.h = h
        self.tilts = []

    def natural_convection_coefficient(self, context, surface, T_surf, T_air, mode):
        self.tilts.append(surface.tilt)
        return self.h


class HalvingHeatBalance(HeatBalanceEngine):
    """Surface temperatures approach a fixed target; the distance to the
    target is halved at each call, starting from `gap` degrees."""

    def __init__(self, gap: float = 10.0):
        self.gap = gap
        self.target = None
        self.calls = 0

    def evaluate(self, context, surface, h_exterior, h_interior, T_in_guess,
                 T_out_guess, T_in_air, T_out_air, mode):
        self.calls += 1
        if self.target is None:
            self.target = (T_in_guess + self.gap, T_out_guess + self.gap)
        T_in = T_in_guess + 0.5 * (self.target[0] - T_in_guess)
        T_out = T_out_guess + 0.5 * (self.target[1] - T_out_guess)
        n = len(context.glazings_of(surface))
        return HeatBalanceResult(T_in, T_out, -100.0, (0.0,) * n, 2.0, 2.0)


class OscillatingHeatBalance(HeatBalanceEngine):
    """Surface temperatures jump 1 degree up and down at each call"""

    def __init__(self):
        self.calls = 0

    def evaluate(self, context, surface, h_exterior, h_interior, T_in_guess,
                 T_out_guess, T_in_air, T_out_air, mode):
        self.calls += 1
        step = 1.0 if self.calls % 2 else -1.0
        n = len(context.glazings_of(surface))
        return HeatBalanceResult(
            T_in_guess + step, T_out_guess + step, -100.0, (0.0,) * n, 2.0, 2.0
        )


class CountingSolar(SolarDistributionEngine):

    def __init__(self):
        self.init_calls = 0
        self.distribute_calls = 0

    def init_solar_gains(self, context, surface, irradiance, mode):
        self.init_calls += 1
        surface.beam_irradiance = irradiance
        surface.sun_is_up = irradiance > 0.0

    def distribute_interior_solar(self, context, surface, mode):
        self.distribute_calls += 1


@pytest.fixture
def stub_engines():
    """Engines with stubs for convection, heat balance and solar distribution;
    the heat balance stub converges geometrically"""
    return Engines(
        heat_balance=HalvingHeatBalance(),
        convection=ConstantConvection(),
        optics=MultilayerOptics(),
        solar=CountingSolar()
    )


@pytest.fixture
def non_converging_engines():
    return Engines(
        heat_balance=OscillatingHeatBalance(),
        convection=ConstantConvection(),
        optics=MultilayerOptics(),
        solar=CountingSolar()
    )
