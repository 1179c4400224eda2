"""Solver registry and the ``solve`` entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Union

from ..errors import SolverUnavailableError, UnsupportedProblemError
from ..logging import get_logger
from ..settings import get_default_solver
from .core import SolveResult, SolverAdapter, SolverOptions, TerminationStatus
from .highs import HighsSolver
from .nlp import NlpSolver

if TYPE_CHECKING:
    from ..modeling.problem import Problem

logger = get_logger(__name__)

SolverFactory = Callable[[], SolverAdapter]

_FACTORIES: Dict[str, SolverFactory] = {}


def register_solver(name: str, factory: SolverFactory, *, replace: bool = False) -> None:
    """
    Make a solver adapter available under ``name``.

    Args:
        name: Case-insensitive solver name.
        factory: Zero-argument callable returning a new adapter.
        replace: Allow overriding an existing registration.

    Raises:
        ValueError: If ``name`` is already registered and ``replace`` is False.
    """
    key = name.lower()
    if key in _FACTORIES and not replace:
        raise ValueError(f"Solver {name!r} is already registered.")
    _FACTORIES[key] = factory


def unregister_solver(name: str) -> None:
    _FACTORIES.pop(name.lower(), None)


def registered_solvers() -> List[str]:
    return sorted(_FACTORIES)


def available_solvers() -> List[str]:
    """Registered solvers whose backing library can be imported."""
    return [name for name in sorted(_FACTORIES) if _FACTORIES[name]().is_available()]


def get_solver(name: str) -> SolverAdapter:
    """
    Create the adapter registered under ``name``.

    Raises:
        SolverUnavailableError: If the name is unknown or the backing
            library is missing.
    """
    key = name.lower()
    if key not in _FACTORIES:
        raise SolverUnavailableError(
            f"Unsupported solver name {name!r}. Supported names: {registered_solvers()}"
        )
    adapter = _FACTORIES[key]()
    if not adapter.is_available():
        raise SolverUnavailableError(f"Solver {name!r} is registered but its library is not installed")
    return adapter


def _resolve(problem: "Problem", solver: Union[str, SolverAdapter, None]) -> SolverAdapter:
    choice = solver if solver is not None else problem.solver
    if choice is None:
        choice = get_default_solver()
    if choice is None:
        raise SolverUnavailableError(
            f"No solver configured for problem {problem.name!r}. Pass solver=..., "
            "call Problem.set_solver(...) or set OPTMODEL_SOLVER."
        )
    if isinstance(choice, SolverAdapter):
        if not choice.is_available():
            raise SolverUnavailableError(f"Solver {choice.name!r} is not available")
        return choice
    return get_solver(choice)


def solve(
    problem: "Problem",
    options: Optional[SolverOptions] = None,
    solver: Union[str, SolverAdapter, None] = None,
) -> SolveResult:
    """
    Solve ``problem`` once and store the result on it.

    The previous result is replaced. Solver-level outcomes (infeasible,
    unbounded, timeout, error) are reported through ``result.status``.

    Args:
        problem: Problem to solve.
        options: Per-solve options; defaults to the problem's options.
        solver: Solver name or adapter overriding the problem's solver.

    Raises:
        SolverUnavailableError: If no usable solver is configured.
        UnsupportedProblemError: If the solver cannot handle the problem
            (e.g. a nonlinear model given to ``"highs"``).
    """
    adapter = _resolve(problem, solver)
    if options is None:
        options = problem.options if problem.options is not None else SolverOptions()
    if not adapter.supports(problem):
        kind = "mixed-integer" if problem.is_mixed_integer else "nonlinear"
        raise UnsupportedProblemError(
            f"Solver {adapter.name!r} cannot solve the {kind} problem {problem.name!r}"
        )

    logger.info(
        "%s: solving with %s (%d variables, %d constraints)",
        problem.name,
        adapter.name,
        problem.num_variables,
        problem.num_constraints,
    )
    # Drop any stale result first so a failing adapter leaves nothing behind.
    problem._touch("re-solve")
    result = adapter.solve(problem, options)
    problem._store_result(result)

    if result.status is TerminationStatus.OPTIMAL:
        logger.info(
            "%s: optimal, objective %.10g in %.3fs", problem.name, result.objective_value, result.solve_time
        )
    else:
        logger.warning("%s: solver %s stopped with status %s: %s", problem.name, adapter.name, result.status.value, result.message)
    return result


register_solver("highs", HighsSolver)
register_solver("trust-constr", lambda: NlpSolver("trust-constr"))
register_solver("slsqp", lambda: NlpSolver("slsqp"))


__all__ = [
    "register_solver",
    "unregister_solver",
    "registered_solvers",
    "available_solvers",
    "get_solver",
    "solve",
]
