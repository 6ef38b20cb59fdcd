"""
Tests for the catalog sandbox
"""
import pickle
import pytest

from fenestra import Quantity
from fenestra.catalog import CatalogSandbox, AnalysisMode, OpaqueMaterial
from fenestra.exceptions import SandboxError, SandboxRestoreError
from fenestra.rating import WindowParameters

Q_ = Quantity

CATALOGS = (
    'materials', 'nominal_R_materials', 'constructions', 'nominal_R',
    'nominal_U', 'frame_dividers', 'spectral_data'
)


def dump(context):
    """Pickles each entry of each list catalog separately"""
    return {c: [pickle.dumps(e) for e in getattr(context, c)] for c in CATALOGS}


class TestEnter:

    def test_scratch_model(self, host_context):
        sandbox = CatalogSandbox(host_context, 'W', 1.5, 1.2, 90.0)
        ctx = sandbox.enter()
        assert ctx is host_context
        assert ctx.mode is AnalysisMode.ISOLATED
        assert ctx.isolated_analysis
        assert not ctx.kickoff
        assert len(ctx.surfaces) == 1 and len(ctx.zones) == 1
        assert ctx.surface.base_surface == 0
        assert ctx.total_materials == 0
        assert ctx.total_constructions == 0
        assert all(len(v) == 1 for v in ctx.report_arrays.values())
        sandbox.exit()
        assert ctx.kickoff

    def test_enter_twice(self, host_context):
        sandbox = CatalogSandbox(host_context, 'W', 1.5, 1.2)
        sandbox.enter()
        with pytest.raises(SandboxError):
            sandbox.enter()
        sandbox.exit()

    def test_second_sandbox_rejected(self, host_context):
        first = CatalogSandbox(host_context, 'A', 1.5, 1.2)
        second = CatalogSandbox(host_context, 'B', 1.5, 1.2)
        first.enter()
        with pytest.raises(SandboxError):
            second.enter()
        first.exit()

    def test_exit_without_enter(self, host_context):
        with pytest.raises(SandboxError):
            CatalogSandbox(host_context, 'W', 1.5, 1.2).exit()

    def test_install_sizes_per_layer_arrays(self, sandbox):
        surface = sandbox.context.surface
        assert len(surface.absorbed_solar) == 2
        assert sandbox.context.total_materials == 3

    def test_install_resizes_surface(self, sandbox, builder):
        assembly, fd = builder.build(sandbox.name, WindowParameters())
        surface = sandbox.install(assembly, fd, 1.2, 1.2, 20.0)
        assert (surface.width, surface.height, surface.tilt) == (1.2, 1.2, 20.0)
        assert surface.area == pytest.approx(1.44)


class TestRoundTrip:

    def test_exit_without_assembly_restores_exactly(self, host_context, builder):
        before = dump(host_context)
        surfaces = pickle.dumps(host_context.surfaces)
        reports = dict(host_context.report_arrays)
        sandbox = CatalogSandbox(host_context, 'W', 1.5, 1.2)
        sandbox.enter()
        assembly, fd = builder.build('W', WindowParameters())
        sandbox.install(assembly, fd)
        assert sandbox.exit() is None
        assert dump(host_context) == before
        assert pickle.dumps(host_context.surfaces) == surfaces
        assert host_context.report_arrays == reports
        assert host_context.mode is AnalysisMode.KICKOFF

    @pytest.mark.parametrize("params", [
        WindowParameters(number_of_panes=1),
        WindowParameters(number_of_panes=3, frame_width=Q_(50, 'mm')),
    ])
    def test_prefix_unchanged_and_suffix_appended(self, host_context, builder, params):
        before = dump(host_context)
        n_mat = host_context.total_materials
        n_con = host_context.total_constructions
        n_fd = host_context.total_frame_dividers
        sandbox = CatalogSandbox(host_context, 'NEW WINDOW', 1.5, 1.2)
        sandbox.enter()
        assembly, fd = builder.build('NEW WINDOW', params)
        sandbox.install(assembly, fd)
        index = sandbox.exit(assembly, fd, nominal_U=2.5)

        after = dump(host_context)
        for c in CATALOGS:
            assert after[c][:len(before[c])] == before[c]
        n_layers = 2 * params.number_of_panes - 1
        n_fd_new = 1 if fd is not None else 0
        assert host_context.total_materials == n_mat + n_layers
        assert host_context.total_constructions == n_con + 1
        assert host_context.total_frame_dividers == n_fd + n_fd_new
        assert index == n_con

        construction = host_context.constructions[index]
        assert construction.is_window
        assert construction.layer_indices == tuple(range(n_mat, n_mat + n_layers))
        assert host_context.nominal_U[index] == 2.5
        if fd is not None:
            assert construction.frame_divider_index == n_fd

    def test_sequence_of_runs(self, host_context, builder):
        before = dump(host_context)
        for k, name in enumerate(('W1', 'W2', 'W3')):
            sandbox = CatalogSandbox(host_context, name, 1.5, 1.2)
            sandbox.enter()
            assembly, fd = builder.build(name, WindowParameters())
            sandbox.install(assembly, fd)
            sandbox.exit(assembly, fd)
        after = dump(host_context)
        for c in ('materials', 'constructions'):
            assert after[c][:len(before[c])] == before[c]
        assert host_context.total_constructions == 1 + 3
        assert host_context.total_materials == 2 + 3 * 3
        names = [c.name for c in host_context.constructions[1:]]
        assert names == ['W1', 'W2', 'W3']

    def test_host_references_stay_valid(self, host_context, builder):
        materials = host_context.materials
        constructions = host_context.constructions
        surface = host_context.surfaces[0]
        sandbox = CatalogSandbox(host_context, 'W', 1.5, 1.2)
        sandbox.enter()
        assembly, fd = builder.build('W', WindowParameters())
        sandbox.install(assembly, fd)
        index = sandbox.exit(assembly, fd)
        assert host_context.materials is materials
        assert host_context.constructions is constructions
        assert host_context.surfaces[0] is surface
        assert constructions[index].name == 'W'
        assert len(materials) == host_context.total_materials

    def test_dirt_factor_applied_on_merge(self, host_context, builder):
        params = WindowParameters(number_of_panes=2, dirt_factor=0.9)
        sandbox = CatalogSandbox(host_context, 'DIRTY', 1.5, 1.2)
        sandbox.enter()
        assembly, fd = builder.build('DIRTY', params)
        sandbox.install(assembly, fd)
        index = sandbox.exit(assembly, fd)
        construction = host_context.constructions[index]
        outer = host_context.materials[construction.layer_indices[0]]
        inner = host_context.materials[construction.layer_indices[-1]]
        assert outer.solar_transmittance == pytest.approx(
            0.9 * assembly.glazings[0].solar_transmittance
        )
        assert outer.dirt_factor == 1.0
        assert inner.solar_transmittance == assembly.glazings[1].solar_transmittance

    def test_zero_dirt_factor_on_merge(self, host_context, builder):
        params = WindowParameters(number_of_panes=1, dirt_factor=0.0)
        sandbox = CatalogSandbox(host_context, 'CLEAN', 1.5, 1.2)
        sandbox.enter()
        assembly, fd = builder.build('CLEAN', params)
        sandbox.install(assembly, fd)
        index = sandbox.exit(assembly, fd)
        construction = host_context.constructions[index]
        pane = host_context.materials[construction.layer_indices[0]]
        assert pane.solar_transmittance == assembly.glazings[0].solar_transmittance

    def test_restored_on_exception(self, host_context):
        before = dump(host_context)
        with pytest.raises(RuntimeError):
            with CatalogSandbox(host_context, 'W', 1.5, 1.2):
                host_context.add_material(OpaqueMaterial('SCRATCH', 0.01, 1.0))
                raise RuntimeError('analysis failed')
        assert dump(host_context) == before
        assert not host_context.isolated_analysis

    def test_corrupted_snapshot(self, host_context):
        sandbox = CatalogSandbox(host_context, 'W', 1.5, 1.2)
        sandbox.enter()
        sandbox._snapshot.materials.append(OpaqueMaterial('INTRUDER', 0.01, 1.0))
        with pytest.raises(SandboxRestoreError):
            sandbox.exit()
