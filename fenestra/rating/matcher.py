"""
Search for a window construction whose U-factor, SHGC and visible
transmittance match a set of target values.

Each candidate parameter vector is built, installed in the scratch model of
the sandbox and evaluated at the winter and the summer rating condition. The
candidates are proposed by a pluggable `SearchStrategy`.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import AbstractSet, Sequence, Any
from fenestra import Quantity
from fenestra.logging import ModuleLogger
from fenestra.exceptions import ConstructionError, PropertyLookupError
from fenestra.config import SolverSettings, MatchSettings
from fenestra.glazing import (
    Gas,
    ConstructionAssembly,
    FrameDividerSpec,
    EnvironmentalCondition,
    PerformanceTargets,
    WINTER,
    SUMMER
)
from fenestra.catalog.sandbox import CatalogSandbox
from fenestra.engines import Engines
from .builder import WindowParameters, ConstructionBuilder
from .solver import PerformanceSolver, SolverResult

Q_ = Quantity
logger = ModuleLogger.get_logger(__name__)


def derive_u_factor(
    Q_winter: Quantity,
    area: Quantity,
    winter: EnvironmentalCondition = WINTER
) -> Quantity:
    """
    Returns the U-factor of the window from the heat gain `Q_winter` at the
    winter condition (negative when the zone loses heat).

    U = -Q_winter / (area * (T_in - T_out))
    """
    dT = winter.T_in.to('K') - winter.T_out.to('K')
    U = -Q_winter / (area * dT)
    return U.to('W / (m ** 2 * K)')


def derive_shgc(
    Q_summer: Quantity,
    U: Quantity,
    area: Quantity,
    summer: EnvironmentalCondition = SUMMER
) -> float:
    """
    Returns the solar heat gain coefficient of the window from the heat gain
    `Q_summer` at the summer condition, after subtracting the heat gain due to
    the indoor/outdoor temperature difference.

    SHGC = (Q_summer - U * area * (T_out - T_in)) / (area * I_s)
    """
    dT = summer.T_out.to('K') - summer.T_in.to('K')
    Q_conduction = U * area * dT
    shgc = (Q_summer - Q_conduction) / (area * summer.I_solar)
    return float(shgc.to('frac').m)


def derive_vt(
    tau_vis: float,
    glazed_area: Quantity,
    fenestration_area: Quantity
) -> float:
    """Returns the visible transmittance of the window: the visible
    transmittance of the glazing at normal incidence times the glazed fraction
    of the window area."""
    return float(tau_vis * (glazed_area / fenestration_area).to('frac').m)


class MatchStatus(Enum):
    MATCHED = 'matched'
    UNMATCHED_BEST_EFFORT = 'unmatched (best effort)'


@dataclass(frozen=True)
class Evaluation:
    """
    Performance of one candidate construction.

    Attributes
    ----------
    params:
        The builder parameters of the candidate.
    assembly:
        The construction assembly.
    frame_divider:
        The frame/divider, or None.
    U:
        U-factor of the entire window.
    SHGC:
        Solar heat gain coefficient of the entire window.
    VT:
        Visible transmittance of the entire window.
    winter, summer:
        Solver results at the winter and summer condition.
    deltas:
        Achieved minus target value for each target that is set ('U', 'SHGC',
        'VT').
    score:
        Sum of the absolute deltas divided by their tolerance. Lower is
        better; zero if no target is set.
    """
    params: WindowParameters
    assembly: ConstructionAssembly
    frame_divider: FrameDividerSpec | None
    U: Quantity
    SHGC: float
    VT: float
    winter: SolverResult
    summer: SolverResult
    deltas: dict[str, Any] = field(default_factory=dict)
    score: float = 0.0

    @property
    def u_center(self) -> Quantity:
        return Q_(self.winter.u_center, 'W / (m ** 2 * K)')

    @property
    def u_edge(self) -> Quantity:
        return Q_(self.winter.u_edge, 'W / (m ** 2 * K)')


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of a matching run.

    Attributes
    ----------
    status:
        MATCHED if the best evaluation is within tolerance of all targets that
        are set, else UNMATCHED_BEST_EFFORT.
    best:
        The evaluation closest to the targets.
    targets:
        The performance targets.
    evaluations:
        Number of candidates evaluated.
    """
    status: MatchStatus
    best: Evaluation
    targets: PerformanceTargets
    evaluations: int

    @property
    def matched(self) -> bool:
        return self.status is MatchStatus.MATCHED

    @property
    def deltas(self) -> dict[str, Any]:
        return self.best.deltas


class SearchStrategy(ABC):
    """
    Policy that proposes the next parameter vector to evaluate. A strategy
    must terminate: after a finite number of proposals `propose()` returns
    None.
    """

    @abstractmethod
    def reset(self, start: WindowParameters) -> None:
        """Prepares a new search starting from `start`."""
        ...

    @abstractmethod
    def propose(
        self,
        best: Evaluation,
        history: Sequence[Evaluation],
        skipped: AbstractSet[tuple] = frozenset()
    ) -> WindowParameters | None:
        """Returns the next candidate to evaluate given the best evaluation so
        far and all evaluations done, or None if the search is exhausted.
        `skipped` holds the keys of candidates that could not be built; these
        are not to be proposed again."""
        ...


DEFAULT_AXES: dict[str, tuple] = {
    'number_of_panes': (1, 2, 3),
    'gas': (Gas.AIR, Gas.ARGON, Gas.KRYPTON, Gas.XENON),
    'coating': ('NONE', 'LOW_E'),
    'tint': ('CLEAR', 'BRONZE', 'GRAY', 'GREEN'),
    'gap_thickness': (
        Q_(6.4, 'mm'), Q_(9.5, 'mm'),
        Q_(12.7, 'mm'), Q_(15.9, 'mm')
    )
}

FRAME_WIDTH_AXIS: tuple = (
    Q_(0.0, 'mm'), Q_(25.0, 'mm'), Q_(50.0, 'mm'), Q_(75.0, 'mm')
)


class CoordinateDescentSearch(SearchStrategy):
    """
    Deterministic coordinate descent over discrete parameter axes.

    The axes are swept in order. For each value of an axis, the best vector
    found so far with that single parameter changed is proposed, unless it has
    already been evaluated. The search stops after `max_sweeps` sweeps over
    all axes.

    Parameters
    ----------
    axes:
        Mapping of `WindowParameters` field names to the candidate values of
        that field. Defaults to `DEFAULT_AXES`.
    max_sweeps:
        Number of sweeps over all axes.
    include_frame_width:
        Adds the frame width as an axis (values `FRAME_WIDTH_AXIS`).
    """

    def __init__(
        self,
        axes: dict[str, Sequence] | None = None,
        max_sweeps: int = 2,
        include_frame_width: bool = False
    ) -> None:
        self.axes = dict(axes if axes is not None else DEFAULT_AXES)
        if include_frame_width:
            self.axes['frame_width'] = FRAME_WIDTH_AXIS
        self.max_sweeps = max_sweeps
        self._queue: list[tuple[str, Any]] = []
        self._sweep = 0

    def reset(self, start: WindowParameters) -> None:
        self._sweep = 0
        self._queue = []

    def _fill_queue(self) -> bool:
        if self._sweep >= self.max_sweeps:
            return False
        self._sweep += 1
        self._queue = [
            (name, value)
            for name, values in self.axes.items()
            for value in values
        ]
        return True

    def propose(
        self,
        best: Evaluation,
        history: Sequence[Evaluation],
        skipped: AbstractSet[tuple] = frozenset()
    ) -> WindowParameters | None:
        evaluated = {e.params.key() for e in history} | set(skipped)
        while True:
            if not self._queue and not self._fill_queue():
                return None
            name, value = self._queue.pop(0)
            candidate = replace(best.params, **{name: value})
            if candidate.key() not in evaluated:
                logger.debug(f"Proposing {name} = {value}: {candidate}")
                return candidate


class PerformanceMatcher:
    """
    Drives the evaluate/compare/adjust loop of a window construction.

    Parameters
    ----------
    sandbox:
        An active sandbox: its context holds the scratch model in which the
        candidates are installed.
    builder:
        Builds the construction of a candidate parameter vector.
    engines:
        The engines that perform the physics.
    strategy:
        Search policy. Defaults to `CoordinateDescentSearch()`.
    settings:
        Tolerances and budget of the matching loop.
    solver_settings:
        Iteration cap and tolerance of the solver.
    """

    def __init__(
        self,
        sandbox: CatalogSandbox,
        builder: ConstructionBuilder,
        engines: Engines,
        strategy: SearchStrategy | None = None,
        settings: MatchSettings = MatchSettings(),
        solver_settings: SolverSettings = SolverSettings()
    ) -> None:
        self.sandbox = sandbox
        self.builder = builder
        self.engines = engines
        self.strategy = strategy if strategy is not None else CoordinateDescentSearch()
        self.settings = settings
        self.solver = PerformanceSolver(sandbox.context, engines, solver_settings)

    def evaluate(self, params: WindowParameters, targets: PerformanceTargets) -> Evaluation:
        """Builds and installs the candidate and evaluates it at the winter
        and summer condition."""
        ctx = self.sandbox.context
        assembly, frame_divider = self.builder.build(self.sandbox.name, params)
        geometry, tilt = self.builder.geometry(params, frame_divider)
        surface = self.sandbox.install(
            assembly, frame_divider,
            geometry.width, geometry.height, tilt
        )
        self.engines.optics.init_optical_coefficients(ctx, 0, ctx.mode)
        area = Q_(geometry.fenestration_area, 'm ** 2')
        winter = self.solver.calc_window_performance(WINTER)
        summer = self.solver.calc_window_performance(SUMMER)
        U = derive_u_factor(Q_(winter.heat_gain, 'W'), area)
        SHGC = derive_shgc(Q_(summer.heat_gain, 'W'), U, area)
        VT = derive_vt(
            ctx.optics_of(surface).visible_transmittance,
            Q_(geometry.glazed_area, 'm ** 2'),
            area
        )
        deltas, score = self._compare(U, SHGC, VT, targets)
        logger.debug(
            f"Evaluated {params}: U = {U:~P.3f}, SHGC = {SHGC:.3f}, "
            f"VT = {VT:.3f}, score = {score:.3f}"
        )
        return Evaluation(
            params=params,
            assembly=assembly,
            frame_divider=frame_divider,
            U=U, SHGC=SHGC, VT=VT,
            winter=winter, summer=summer,
            deltas=deltas, score=score
        )

    def _compare(
        self,
        U: Quantity,
        SHGC: float,
        VT: float,
        targets: PerformanceTargets
    ) -> tuple[dict[str, Any], float]:
        deltas = {}
        score = 0.0
        tol_U = self.settings.u_factor_tolerance.to('W / (m ** 2 * K)').m
        tol_opt = self.settings.optical_tolerance
        if targets.U is not None:
            deltas['U'] = U - targets.U.to('W / (m ** 2 * K)')
            score += abs(deltas['U'].m) / tol_U
        if targets.SHGC is not None:
            deltas['SHGC'] = SHGC - targets.SHGC
            score += abs(deltas['SHGC']) / tol_opt
        if targets.VT is not None:
            deltas['VT'] = VT - targets.VT
            score += abs(deltas['VT']) / tol_opt
        return deltas, score

    def within_tolerance(self, evaluation: Evaluation) -> bool:
        tol_U = self.settings.u_factor_tolerance.to('W / (m ** 2 * K)').m
        tol_opt = self.settings.optical_tolerance
        for metric, delta in evaluation.deltas.items():
            if metric == 'U':
                if abs(delta.m) > tol_U:
                    return False
            elif abs(delta) > tol_opt:
                return False
        return True

    def match(self, params: WindowParameters, targets: PerformanceTargets) -> MatchResult:
        """
        Runs the matching loop starting from `params`.

        Without targets, the first evaluation is accepted. Otherwise,
        candidates proposed by the search strategy are evaluated until one is
        within tolerance of the targets, the strategy is exhausted or the
        evaluation budget is used up. In the latter two cases the result
        holds the best evaluation with status UNMATCHED_BEST_EFFORT.
        """
        best = self.evaluate(params, targets)
        history = [best]
        skipped: set[tuple] = set()
        if targets.is_empty or self.within_tolerance(best):
            return self._result(MatchStatus.MATCHED, best, targets, history)
        self.strategy.reset(params)
        attempts = 1
        while attempts < self.settings.max_evaluations:
            candidate = self.strategy.propose(best, history, skipped)
            if candidate is None:
                break
            attempts += 1
            try:
                evaluation = self.evaluate(candidate, targets)
            except (ConstructionError, PropertyLookupError) as err:
                logger.warning(f"Candidate {candidate} skipped: {err}")
                skipped.add(candidate.key())
                continue
            history.append(evaluation)
            if evaluation.score < best.score:
                best = evaluation
            if self.within_tolerance(evaluation):
                return self._result(MatchStatus.MATCHED, evaluation, targets, history)
        return self._result(MatchStatus.UNMATCHED_BEST_EFFORT, best, targets, history)

    def _result(
        self,
        status: MatchStatus,
        best: Evaluation,
        targets: PerformanceTargets,
        history: list[Evaluation]
    ) -> MatchResult:
        name = self.sandbox.name
        if status is MatchStatus.MATCHED:
            logger.info(
                f"'{name}' matched after {len(history)} evaluation(s): "
                f"U = {best.U:~P.3f}, SHGC = {best.SHGC:.3f}, VT = {best.VT:.3f}"
            )
        else:
            deltas = ', '.join(
                f"{k}: {getattr(v, 'm', v):+.3f}"
                for k, v in best.deltas.items()
            )
            logger.warning(
                f"'{name}' could not be matched within {len(history)} "
                f"evaluation(s); closest candidate has deltas {deltas}"
            )
        return MatchResult(status, best, targets, len(history))
