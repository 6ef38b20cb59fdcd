"""
Commits the outcome of a matching run to the host catalogs and passes a
performance report to an optional report sink.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Any
from fenestra import Quantity
from fenestra.logging import ModuleLogger
from fenestra.glazing import PerformanceTargets, ConstructionAssembly, GapLayer
from fenestra.catalog.sandbox import CatalogSandbox
from .matcher import MatchResult, MatchStatus

Q_ = Quantity
logger = ModuleLogger.get_logger(__name__)


@dataclass(frozen=True)
class PerformanceReport:
    """
    Record of a published window construction.

    Attributes
    ----------
    name:
        Name of the construction.
    status:
        Outcome of the matching run.
    construction_index:
        Index of the construction in the host construction catalog.
    targets:
        The performance targets.
    U:
        Achieved U-factor of the entire window.
    SHGC:
        Achieved solar heat gain coefficient.
    VT:
        Achieved visible transmittance.
    deltas:
        Achieved minus target value of each target that was set.
    layers:
        Description of each layer, from the exterior to the interior side.
    u_center:
        Center-of-glass U-factor at the winter condition.
    u_edge:
        Edge-of-glass U-factor at the winter condition.
    evaluations:
        Number of candidate constructions evaluated.
    """
    name: str
    status: MatchStatus
    construction_index: int
    targets: PerformanceTargets
    U: Quantity
    SHGC: float
    VT: float
    deltas: dict[str, Any] = field(default_factory=dict)
    layers: tuple[str, ...] = ()
    u_center: Quantity = Q_(0.0, 'W / (m ** 2 * K)')
    u_edge: Quantity = Q_(0.0, 'W / (m ** 2 * K)')
    evaluations: int = 1

    def to_dict(self) -> dict[str, Any]:
        """Returns the report as a flat dictionary of plain values (U-values in
        W/(m².K))."""
        def _m(value):
            return getattr(value, 'm', value)

        t = self.targets
        return {
            'name': self.name,
            'status': self.status.value,
            'U': self.U.to('W / (m ** 2 * K)').m,
            'SHGC': self.SHGC,
            'VT': self.VT,
            'U target': t.U.to('W / (m ** 2 * K)').m if t.U is not None else None,
            'SHGC target': t.SHGC,
            'VT target': t.VT,
            'U delta': _m(self.deltas.get('U')),
            'SHGC delta': self.deltas.get('SHGC'),
            'VT delta': self.deltas.get('VT'),
            'U center': self.u_center.to('W / (m ** 2 * K)').m,
            'U edge': self.u_edge.to('W / (m ** 2 * K)').m,
            'layers': ' | '.join(self.layers),
            'evaluations': self.evaluations
        }

    def __str__(self):
        l1 = f"Window construction '{self.name}' ({self.status.value})\n"
        l2 = f"\tU: {self.U:~P.3f}\n"
        l3 = f"\tSHGC: {self.SHGC:.3f}\n"
        l4 = f"\tVT: {self.VT:.3f}\n"
        l5 = f"\tU center-of-glass: {self.u_center:~P.3f}\n"
        l6 = f"\tU edge-of-glass: {self.u_edge:~P.3f}\n"
        l7 = ''.join(f"\tlayer {i + 1}: {s}\n" for i, s in enumerate(self.layers))
        return l1 + l2 + l3 + l4 + l5 + l6 + l7


ReportSink = Callable[[PerformanceReport], Any]


def describe_layers(assembly: ConstructionAssembly) -> tuple[str, ...]:
    descriptions = []
    for layer in assembly.layers:
        if isinstance(layer, GapLayer):
            descriptions.append(
                f"{layer.name}: {layer.thickness * 1e3:.1f} mm {layer.gas.value}"
            )
        else:
            descriptions.append(
                f"{layer.name}: {layer.thickness * 1e3:.1f} mm glass, "
                f"tau_sol {layer.solar_transmittance:.3f}, "
                f"e {layer.ir_emissivity_front:.2f}/{layer.ir_emissivity_back:.2f}"
            )
    return tuple(descriptions)


class ResultPublisher:
    """
    Parameters
    ----------
    sink:
        Optional callable that receives the `PerformanceReport` of each
        published construction (e.g. `ReportShelf.add` or `list.append`).
    """

    def __init__(self, sink: ReportSink | None = None) -> None:
        self.sink = sink

    def publish(self, sandbox: CatalogSandbox, result: MatchResult) -> PerformanceReport:
        """
        Leaves the sandbox and merges the best construction of the matching
        run into the restored host catalogs. Its nominal U-factor is set to the
        achieved U-factor and its nominal resistance to the sum of the nominal
        layer resistances.
        """
        best = result.best
        frame_divider = best.frame_divider
        if frame_divider is not None:
            frame_divider = frame_divider.with_edge_ratio(best.winter.u_center)
        U = best.U.to('W / (m ** 2 * K)')
        index = sandbox.exit(best.assembly, frame_divider, nominal_U=U.m)
        ctx = sandbox.context
        ctx.nominal_U[index] = U.m
        ctx.nominal_R[index] = best.assembly.nominal_R
        report = PerformanceReport(
            name=best.assembly.name,
            status=result.status,
            construction_index=index,
            targets=result.targets,
            U=U,
            SHGC=best.SHGC,
            VT=best.VT,
            deltas=dict(best.deltas),
            layers=describe_layers(best.assembly),
            u_center=best.u_center,
            u_edge=best.u_edge,
            evaluations=result.evaluations
        )
        logger.info(
            f"Published construction '{report.name}' at index {index} "
            f"({result.status.value})"
        )
        if self.sink is not None:
            self.sink(report)
        return report
