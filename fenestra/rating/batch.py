"""
Runs the matching loop for a batch of window definitions and publishes each
resulting construction into the host catalogs.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable
from fenestra.logging import ModuleLogger
from fenestra.exceptions import (
    BatchInputError,
    ConstructionError,
    PropertyLookupError
)
from fenestra.config import SolverSettings, MatchSettings, BuilderSettings
from fenestra.glazing import PerformanceTargets
from fenestra.catalog.context import SimulationContext
from fenestra.catalog.sandbox import CatalogSandbox
from fenestra.catalog.property_database import PropertyDatabase
from fenestra.engines import Engines
from .builder import WindowParameters, ConstructionBuilder
from .matcher import (
    PerformanceMatcher,
    SearchStrategy,
    CoordinateDescentSearch,
    MatchStatus
)
from .publisher import ResultPublisher, PerformanceReport, ReportSink

logger = ModuleLogger.get_logger(__name__)


@dataclass(frozen=True)
class WindowDefinition:
    """
    Input definition of a window construction.

    Attributes
    ----------
    name:
        Name of the construction. Must be unique among the definitions of the
        batch and the constructions already in the host catalog.
    params:
        Parameters of the construction to start the search from.
    targets:
        Target performance of the window.
    """
    name: str
    params: WindowParameters = WindowParameters()
    targets: PerformanceTargets = PerformanceTargets()


@dataclass
class BatchResult:
    """
    Attributes
    ----------
    reports:
        Report of each published construction.
    errors:
        Errors of the definitions that were skipped.
    """
    reports: list[PerformanceReport] = field(default_factory=list)
    errors: list[BatchInputError] = field(default_factory=list)

    @property
    def errors_found(self) -> bool:
        return len(self.errors) > 0

    @property
    def all_matched(self) -> bool:
        return not self.errors_found and all(
            r.status is MatchStatus.MATCHED for r in self.reports
        )


class BatchDriver:
    """
    Parameters
    ----------
    context:
        The host simulation context into which the constructions are
        published.
    database:
        The property database. Use `PropertyDatabase.load()`.
    engines:
        The engines that perform the physics. Defaults to `Engines.default()`
        configured with the solver settings.
    sink:
        Optional report sink (see `ResultPublisher`).
    strategy_factory:
        Callable returning a new search strategy for each definition.
    """

    def __init__(
        self,
        context: SimulationContext,
        database: PropertyDatabase,
        engines: Engines | None = None,
        sink: ReportSink | None = None,
        strategy_factory: Callable[[], SearchStrategy] = CoordinateDescentSearch,
        solver_settings: SolverSettings = SolverSettings(),
        match_settings: MatchSettings = MatchSettings(),
        builder_settings: BuilderSettings = BuilderSettings()
    ) -> None:
        self.context = context
        self.builder = ConstructionBuilder(database, builder_settings)
        if engines is None:
            engines = Engines.default(
                solver_settings.inner_max_iterations,
                solver_settings.inner_tolerance.to('K').m,
                builder_settings.edge_band.to('m').m
            )
        self.engines = engines
        self.publisher = ResultPublisher(sink)
        self.strategy_factory = strategy_factory
        self.solver_settings = solver_settings
        self.match_settings = match_settings

    def _check_name(self, name: str, seen: set[str]) -> None:
        if not name or not name.strip():
            raise BatchInputError("blank construction name")
        key = name.strip().upper()
        if key in seen:
            raise BatchInputError(f"duplicate construction name '{name}'")
        if self.context.find_construction(name.strip()) is not None:
            raise BatchInputError(
                f"construction '{name}' already exists in the construction "
                f"catalog"
            )

    def run_one(self, definition: WindowDefinition) -> PerformanceReport:
        """Matches and publishes a single window definition."""
        name = definition.name.strip()
        params = definition.params
        width, height, tilt = self.builder.database.fenestration_type(
            params.fenestration_type
        )
        with CatalogSandbox(self.context, name, width, height, tilt) as sandbox:
            matcher = PerformanceMatcher(
                sandbox, self.builder, self.engines,
                strategy=self.strategy_factory(),
                settings=self.match_settings,
                solver_settings=self.solver_settings
            )
            result = matcher.match(params, definition.targets)
            return self.publisher.publish(sandbox, result)

    def run(
        self,
        definitions: Iterable[WindowDefinition],
        stop_after_first: bool = False
    ) -> BatchResult:
        """
        Matches and publishes each definition in turn. Definitions with a blank
        or duplicate name, or with parameters that cannot be built, are
        skipped and recorded in the errors of the returned result.

        If `stop_after_first` is True, the batch ends after the first
        construction has been published (matched or not).
        """
        batch = BatchResult()
        seen: set[str] = set()
        for i, definition in enumerate(definitions):
            try:
                self._check_name(definition.name, seen)
                seen.add(definition.name.strip().upper())
                report = self.run_one(definition)
            except BatchInputError as err:
                logger.warning(f"Window definition {i + 1} skipped: {err}")
                batch.errors.append(err)
                continue
            except (ConstructionError, PropertyLookupError) as err:
                error = BatchInputError(f"'{definition.name}': {err}")
                logger.warning(f"Window definition {i + 1} skipped: {error}")
                batch.errors.append(error)
                continue
            batch.reports.append(report)
            if stop_after_first:
                break
        logger.info(
            f"Batch finished: {len(batch.reports)} construction(s) "
            f"published, {len(batch.errors)} definition(s) skipped"
        )
        return batch
