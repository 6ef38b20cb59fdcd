"""
Default settings of the solver, the matching loop and the construction
builder. Each settings object is immutable; use `dataclasses.replace` to
derive a modified copy.
"""
from dataclasses import dataclass
from fenestra import Quantity

Q_ = Quantity


@dataclass(frozen=True)
class SolverSettings:
    """
    Attributes
    ----------
    max_iterations:
        Maximum number of outer iterations between convection coefficients
        and heat balance.
    tolerance:
        Convergence tolerance on the change of both the interior and exterior
        surface temperature between two successive iterations.
    inner_max_iterations:
        Maximum number of iterations of the heat balance engine to update its
        linearized radiation and gap coefficients.
    inner_tolerance:
        Convergence tolerance of the inner heat balance iterations.
    """
    max_iterations: int = 20
    tolerance: Quantity = Q_(0.1, 'K')
    inner_max_iterations: int = 50
    inner_tolerance: Quantity = Q_(1.e-3, 'K')


@dataclass(frozen=True)
class MatchSettings:
    """
    Attributes
    ----------
    u_factor_tolerance:
        Maximum allowable deviation between target and achieved U-factor.
    optical_tolerance:
        Maximum allowable deviation between target and achieved SHGC (and VT,
        if a VT target is set).
    max_evaluations:
        Budget of the matching loop: the maximum number of parameter vectors
        that are evaluated (each evaluation is one winter and one summer
        solver run).
    """
    u_factor_tolerance: Quantity = Q_(0.05, 'W / (m ** 2 * K)')
    optical_tolerance: float = 0.01
    max_evaluations: int = 40


@dataclass(frozen=True)
class BuilderSettings:
    """
    Attributes
    ----------
    max_divider_spacing:
        Maximum distance between dividers, which determines the number of
        dividers along each axis of the glazing.
    edge_band:
        Width of the edge-of-glass zone along the frame.
    """
    max_divider_spacing: Quantity = Q_(0.3, 'm')
    edge_band: Quantity = Q_(63.5, 'mm')
