"""Problem summary utilities.

High-level introspection of a problem: sizes, structure and the outcome of
the last solve.
"""

from __future__ import annotations

import math
import sys
from collections import Counter
from typing import IO, TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .modeling.constraints import Constraint
    from .modeling.problem import Problem


def _constraint_kind(con: "Constraint") -> str:
    if con.is_equality:
        return "equality"
    if math.isinf(con.lower) or math.isinf(con.upper):
        return "inequality"
    return "range"


def problem_summary(problem: "Problem") -> Dict[str, Any]:
    """
    Generate a summary dictionary for a problem.

    Parameters
    ----------
    problem:
        Problem to analyze.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing:
        - name: str
        - sense: "minimize" or "maximize"
        - n_variables: int
        - n_integer_variables: int
        - n_fixed_variables: int
        - n_constraints: int
        - constraint_kinds: Dict[str, int] (equality / inequality / range)
        - n_nonlinear_constraints: int
        - n_parameters: int
        - is_linear: bool
        - is_mixed_integer: bool
        - status: last termination status, or None
        - objective_value: last objective value, or None
    """
    variables = problem.variables
    constraints = problem.constraints
    kinds = Counter(_constraint_kind(con) for con in constraints)
    result = problem.result

    return {
        "name": problem.name,
        "sense": problem.sense.value,
        "n_variables": len(variables),
        "n_integer_variables": sum(1 for var in variables if var.is_integer),
        "n_fixed_variables": sum(1 for var in variables if var.is_fixed),
        "n_constraints": len(constraints),
        "constraint_kinds": dict(kinds),
        "n_nonlinear_constraints": sum(1 for con in constraints if not con.is_linear),
        "n_parameters": len(problem.parameters),
        "is_linear": problem.is_linear,
        "is_mixed_integer": problem.is_mixed_integer,
        "status": None if result is None else result.status.value,
        "objective_value": None if result is None else result.objective_value,
    }


def print_problem_summary(
    problem: "Problem",
    file: Optional[IO[str]] = None,
) -> None:
    """
    Pretty-print a problem summary to stdout or a file.

    Each line shows one figure from problem_summary(), which returns them as
    a dict for programmatic use.

    Parameters
    ----------
    problem:
        Problem to summarize.
    file:
        File-like object to write to. If None, writes to sys.stdout.
    """
    if file is None:
        file = sys.stdout

    summary = problem_summary(problem)

    print(f"Problem Summary: {summary['name']}", file=file)
    print("=" * 50, file=file)
    print(f"Sense: {summary['sense']}", file=file)
    print(
        f"Variables: {summary['n_variables']} "
        f"({summary['n_integer_variables']} integer, {summary['n_fixed_variables']} fixed)",
        file=file,
    )
    print(f"Constraints: {summary['n_constraints']}", file=file)
    for kind, count in sorted(summary["constraint_kinds"].items()):
        print(f"  {kind}: {count}", file=file)
    print(f"Nonlinear constraints: {summary['n_nonlinear_constraints']}", file=file)
    print(f"Parameters: {summary['n_parameters']}", file=file)
    print(f"Linear: {summary['is_linear']}", file=file)
    print(f"Mixed-integer: {summary['is_mixed_integer']}", file=file)
    status = summary["status"] if summary["status"] is not None else "not solved"
    print(f"Status: {status}", file=file)
    if summary["objective_value"] is not None:
        print(f"Objective: {summary['objective_value']:.10g}", file=file)


__all__ = ["problem_summary", "print_problem_summary"]
