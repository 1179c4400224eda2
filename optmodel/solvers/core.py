"""
Core types shared by all solver adapters.

Every adapter reports its outcome through the same closed
:class:`TerminationStatus` enumeration and the same :class:`SolveResult`
container. Infeasibility, unboundedness, limits and numerical trouble are
statuses, not exceptions; exceptions are reserved for problems a solver
cannot accept at all.

Dual values follow a single convention: ``dual[c]`` is the rate of change of
the optimal objective when the bounds of ``c`` are shifted upward (i.e. the
right-hand side increases). Reduced costs use the same convention for
variable bounds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from ..modeling.constraints import Constraint
    from ..modeling.problem import Problem
    from ..modeling.variables import Variable


class TerminationStatus(Enum):
    """Normalized solver outcome."""

    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class SolverOptions:
    """
    Per-solve configuration.

    Adapters ignore fields they have no use for.

    Args:
        time_limit: Wall-clock limit in seconds. When reached the solver
            reports ``TIMEOUT`` instead of being cancelled.
        max_iterations: Iteration limit; also reported as ``TIMEOUT``.
        tolerance: Feasibility/optimality tolerance.
        verbose: Print the solver's own log. None defers to
            :func:`optmodel.settings.is_verbose`.
        extra: Solver-specific options passed through unchanged.
    """

    time_limit: Optional[float] = None
    max_iterations: Optional[int] = None
    tolerance: Optional[float] = None
    verbose: Optional[bool] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.time_limit is not None and not self.time_limit > 0.0:
            raise ValueError("time_limit must be positive.")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")
        if self.tolerance is not None and not self.tolerance > 0.0:
            raise ValueError("tolerance must be positive.")

    def resolved_verbose(self) -> bool:
        from ..settings import is_verbose

        return is_verbose() if self.verbose is None else bool(self.verbose)


@dataclass(frozen=True)
class SolveResult:
    """
    Outcome of one solve; replaced wholesale by the next solve.

    Attributes:
        status: Normalized termination status.
        message: Solver message explaining the status.
        solver: Name of the adapter that produced the result.
        objective_value: Objective in the problem's own sense, if available.
        primal: Variable values, or None when no solution is available.
        dual: Constraint duals (empty when the solver provides none).
        reduced_costs: Duals of variable bounds (may be empty).
        iterations: Solver iterations, if reported.
        solve_time: Wall-clock seconds spent in the solver.
        incumbent: Best feasible point found before a limit stopped the
            solver. Informational only; the query functions never read it.
    """

    status: TerminationStatus
    message: str
    solver: str
    objective_value: Optional[float] = None
    primal: Optional[Dict["Variable", float]] = None
    dual: Dict["Constraint", float] = field(default_factory=dict)
    reduced_costs: Dict["Variable", float] = field(default_factory=dict)
    iterations: Optional[int] = None
    solve_time: float = 0.0
    incumbent: Optional[Dict["Variable", float]] = None

    @property
    def has_values(self) -> bool:
        return self.primal is not None

    @property
    def has_duals(self) -> bool:
        return bool(self.dual)

    @property
    def is_optimal(self) -> bool:
        return self.status is TerminationStatus.OPTIMAL

    @classmethod
    def failed(
        cls,
        status: TerminationStatus,
        message: str,
        solver: str,
        iterations: Optional[int] = None,
        solve_time: float = 0.0,
        incumbent: Optional[Dict["Variable", float]] = None,
    ) -> "SolveResult":
        """Result without a solution."""
        return cls(
            status=status,
            message=message,
            solver=solver,
            iterations=iterations,
            solve_time=solve_time,
            incumbent=incumbent,
        )


class SolverAdapter(ABC):
    """
    Bridge between a :class:`~optmodel.Problem` and an external solver.

    Subclasses translate the problem, call the solver once and normalize its
    answer into a :class:`SolveResult`. They must not store the result on the
    problem; :func:`optmodel.solvers.solve` does that.
    """

    name: str = "solver"

    def is_available(self) -> bool:
        """Return False when the backing library cannot be imported."""
        return True

    def supports(self, problem: "Problem") -> bool:
        """Return True if this adapter can handle ``problem``."""
        return True

    @abstractmethod
    def solve(self, problem: "Problem", options: SolverOptions) -> SolveResult:
        """Solve ``problem`` and return a normalized result."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = [
    "TerminationStatus",
    "SolverOptions",
    "SolveResult",
    "SolverAdapter",
]
