from .builder import WindowParameters, ConstructionBuilder
from .solver import PerformanceSolver, SolverResult
from .matcher import (
    derive_u_factor,
    derive_shgc,
    derive_vt,
    MatchStatus,
    Evaluation,
    MatchResult,
    SearchStrategy,
    CoordinateDescentSearch,
    PerformanceMatcher
)
from .publisher import PerformanceReport, ResultPublisher
from .batch import WindowDefinition, BatchDriver, BatchResult
