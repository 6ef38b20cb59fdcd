"""
Tests for the performance matcher, the search strategy and the derivation of
U-factor, SHGC and VT
"""
import math
from dataclasses import replace
from types import SimpleNamespace
import pytest

from fenestra import Quantity
from fenestra.config import MatchSettings
from fenestra.engines import Engines
from fenestra.glazing import Gas, PerformanceTargets
from fenestra.rating import (
    ConstructionBuilder,
    WindowParameters,
    PerformanceMatcher,
    CoordinateDescentSearch,
    MatchStatus,
    derive_u_factor,
    derive_shgc,
    derive_vt
)

Q_ = Quantity


class TestDerivation:

    def test_shgc_from_literal_solver_outputs(self):
        shgc = derive_shgc(
            Q_summer=Q_(600.0, 'W'),
            U=Q_(1.0, 'W / (m ** 2 * K)'),
            area=Q_(1.0, 'm ** 2')
        )
        assert shgc == pytest.approx(592 / 783)
        assert shgc == pytest.approx(0.7561, abs=1e-4)

    def test_u_factor(self):
        U = derive_u_factor(Q_(-78.0, 'W'), Q_(1.0, 'm ** 2'))
        assert U.m == pytest.approx(2.0)
        assert U.units == Q_(1, 'W / (m ** 2 * K)').units

    def test_vt(self):
        vt = derive_vt(0.8, Q_(1.8, 'm ** 2'), Q_(2.0, 'm ** 2'))
        assert vt == pytest.approx(0.72)


def evaluation(params):
    return SimpleNamespace(params=params)


class TestCoordinateDescent:

    def test_skips_evaluated_and_terminates(self):
        start = WindowParameters(number_of_panes=2)
        search = CoordinateDescentSearch(axes={'number_of_panes': (1, 2, 3)})
        search.reset(start)
        history = [evaluation(start)]
        proposals = []
        while (candidate := search.propose(history[0], history)) is not None:
            proposals.append(candidate.number_of_panes)
            history.append(evaluation(candidate))
        assert proposals == [1, 3]

    def test_moves_from_best(self):
        start = WindowParameters(number_of_panes=1, gas=Gas.AIR)
        search = CoordinateDescentSearch(
            axes={'number_of_panes': (1, 2), 'gas': (Gas.AIR, Gas.ARGON)}
        )
        search.reset(start)
        history = [evaluation(start)]
        first = search.propose(history[0], history)
        assert first.number_of_panes == 2
        history.append(evaluation(first))
        # suppose the double pane is the best so far
        second = search.propose(history[1], history)
        assert second.number_of_panes == 2 and second.gas is Gas.ARGON

    def test_sweep_limit(self):
        search = CoordinateDescentSearch(axes={'tint': ('CLEAR', 'GRAY')}, max_sweeps=1)
        start = WindowParameters()
        search.reset(start)
        history = [evaluation(start)]
        gray = search.propose(history[0], history)
        history.append(evaluation(gray))
        # the second sweep is not done: CLEAR from GRAY is never proposed
        assert search.propose(history[1], history) is None

    def test_frame_width_axis(self):
        search = CoordinateDescentSearch(include_frame_width=True)
        assert 'frame_width' in search.axes


class RecordingSolver:
    """Wraps a solver and records the conditions it is called with"""

    def __init__(self, solver):
        self.solver = solver
        self.conditions = []

    def calc_window_performance(self, condition):
        self.conditions.append(condition.name)
        return self.solver.calc_window_performance(condition)


class RecordingBuilder(ConstructionBuilder):
    """Records the tint of each window it is asked to build"""

    def __init__(self, database):
        super().__init__(database)
        self.tints = []

    def build(self, name, params):
        self.tints.append(params.tint)
        return super().build(name, params)


@pytest.fixture
def matcher_factory(builder):
    def _make(sandbox, strategy=None, settings=MatchSettings()):
        matcher = PerformanceMatcher(
            sandbox, builder, Engines.default(),
            strategy=strategy, settings=settings
        )
        matcher.solver = RecordingSolver(matcher.solver)
        return matcher
    return _make


class TestPerformanceMatcher:

    def test_unset_targets_fast_path(self, sandbox, matcher_factory):
        matcher = matcher_factory(sandbox)
        result = matcher.match(WindowParameters(), PerformanceTargets())
        assert result.status is MatchStatus.MATCHED
        assert result.evaluations == 1
        assert matcher.solver.conditions == ['winter', 'summer']
        assert result.deltas == {}

    def test_plausible_double_glazing(self, sandbox, matcher_factory):
        result = matcher_factory(sandbox).match(WindowParameters(), PerformanceTargets())
        best = result.best
        assert 1.5 < best.U.to('W / (m ** 2 * K)').m < 4.0
        assert 0.4 < best.SHGC < 0.9
        assert best.VT == pytest.approx(
            sandbox.context.optics_of(sandbox.context.surface).visible_transmittance
        )

    def test_low_e_argon_lowers_u(self, sandbox, matcher_factory):
        matcher = matcher_factory(sandbox)
        targets = PerformanceTargets()
        clear = matcher.evaluate(WindowParameters(), targets)
        low_e = matcher.evaluate(
            WindowParameters(coating='LOW_E', gas=Gas.ARGON), targets
        )
        assert low_e.U < clear.U
        assert low_e.SHGC < clear.SHGC

    def test_target_reached_by_search(self, sandbox, matcher_factory):
        matcher = matcher_factory(sandbox)
        reference = matcher.evaluate(WindowParameters(number_of_panes=2), PerformanceTargets())
        targets = PerformanceTargets(U=reference.U, SHGC=reference.SHGC)
        strategy = CoordinateDescentSearch(axes={'number_of_panes': (1, 2, 3)})
        matcher = matcher_factory(sandbox, strategy=strategy)
        result = matcher.match(WindowParameters(number_of_panes=1), targets)
        assert result.status is MatchStatus.MATCHED
        assert result.best.params.number_of_panes == 2
        assert abs(result.deltas['U'].m) <= 0.05
        assert abs(result.deltas['SHGC']) <= 0.01

    def test_target_within_tolerance_at_start(self, sandbox, matcher_factory):
        matcher = matcher_factory(sandbox)
        reference = matcher.evaluate(WindowParameters(), PerformanceTargets())
        targets = PerformanceTargets(U=reference.U + Q_(0.02, 'W / (m ** 2 * K)'))
        result = matcher_factory(sandbox).match(WindowParameters(), targets)
        assert result.status is MatchStatus.MATCHED
        assert result.evaluations == 1

    def test_exhausted_budget_reports_best_effort(self, sandbox, matcher_factory):
        settings = MatchSettings(max_evaluations=3)
        matcher = matcher_factory(sandbox, settings=settings)
        targets = PerformanceTargets(U=Q_(0.01, 'W / (m ** 2 * K)'), SHGC=0.05)
        result = matcher.match(WindowParameters(), targets)
        assert result.status is MatchStatus.UNMATCHED_BEST_EFFORT
        assert not result.matched
        assert result.evaluations == 3
        assert len(matcher.solver.conditions) == 6
        assert result.deltas['U'].m > 0.0
        assert set(result.deltas) == {'U', 'SHGC'}

    def test_exhausted_strategy_reports_best_effort(self, sandbox, matcher_factory):
        strategy = CoordinateDescentSearch(axes={'tint': ('CLEAR', 'GRAY')}, max_sweeps=1)
        matcher = matcher_factory(sandbox, strategy=strategy)
        targets = PerformanceTargets(VT=0.05)
        result = matcher.match(WindowParameters(), targets)
        assert result.status is MatchStatus.UNMATCHED_BEST_EFFORT
        assert result.evaluations == 2
        # gray glass transmits less light: closer to the target
        assert result.best.params.tint == 'GRAY'

    def test_unbuildable_candidate_tried_once(self, sandbox, database):
        builder = RecordingBuilder(database)
        strategy = CoordinateDescentSearch(axes={'tint': ('PURPLE', 'GRAY')})
        matcher = PerformanceMatcher(sandbox, builder, Engines.default(), strategy=strategy)
        result = matcher.match(WindowParameters(), PerformanceTargets(VT=0.05))
        assert builder.tints == ['CLEAR', 'PURPLE', 'GRAY']
        assert result.status is MatchStatus.UNMATCHED_BEST_EFFORT
        assert result.evaluations == 2
        assert result.best.params.tint == 'GRAY'

    def test_skipped_keys_not_proposed(self):
        start = WindowParameters()
        search = CoordinateDescentSearch(axes={'tint': ('PURPLE', 'GRAY')})
        search.reset(start)
        history = [evaluation(start)]
        skipped = {replace(start, tint='PURPLE').key()}
        assert search.propose(history[0], history, skipped).tint == 'GRAY'

    def test_surface_follows_fenestration_type(self, sandbox, matcher_factory):
        matcher = matcher_factory(sandbox)
        params = WindowParameters(
            fenestration_type='SKYLIGHT',
            frame_width=Q_(50, 'mm'),
            divider_width=Q_(20, 'mm')
        )
        result = matcher.evaluate(params, PerformanceTargets())
        surface = sandbox.context.surface
        assert (surface.width, surface.height, surface.tilt) == (1.2, 1.2, 20.0)
        fd = result.frame_divider
        assert fd.horizontal_dividers == math.ceil(surface.height / 0.3)
        assert fd.vertical_dividers == math.ceil(surface.width / 0.3)
