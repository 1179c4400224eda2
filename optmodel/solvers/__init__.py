"""
Solver adapters.

Built-in solvers:

- ``"highs"``: LP and MILP through SciPy's HiGHS bindings.
- ``"trust-constr"``: smooth NLP, interior point, with multipliers.
- ``"slsqp"``: smooth NLP, sequential quadratic programming.

Example:
    >>> from optmodel import Problem, NonNegativeReals
    >>> from optmodel.solvers import SolverOptions, solve
    >>> p = Problem()
    >>> x = p.register("x", NonNegativeReals)
    >>> p.set_objective("min", (x - 2) ** 2)
    >>> solve(p, SolverOptions(time_limit=10.0), solver="trust-constr").status.value
    'optimal'
"""

from .core import SolveResult, SolverAdapter, SolverOptions, TerminationStatus
from .highs import HighsSolver
from .nlp import NlpSolver
from .registry import (
    available_solvers,
    get_solver,
    register_solver,
    registered_solvers,
    solve,
    unregister_solver,
)
from .standard_form import LinearForm, compile_linear

__all__ = [
    # Core types
    "TerminationStatus",
    "SolverOptions",
    "SolveResult",
    "SolverAdapter",
    # Adapters
    "HighsSolver",
    "NlpSolver",
    # Registry
    "register_solver",
    "unregister_solver",
    "registered_solvers",
    "available_solvers",
    "get_solver",
    "solve",
    # Standard form
    "LinearForm",
    "compile_linear",
]
