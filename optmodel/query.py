"""
Result queries.

Every function here is a pure read of the result stored on a problem by its
last solve. Queries fail with :class:`~optmodel.errors.NoSolutionError`
before the first solve, after a solve that produced no solution and after
any modification of the problem.

Example:
    >>> from optmodel import Problem, NonNegativeReals, value, dual
    >>> p = Problem(solver="highs")
    >>> x = p.register("x", NonNegativeReals)
    >>> p.set_objective("min", 3 * x)
    >>> c = p.add_constraint("c", x >= 2)
    >>> _ = p.optimize()
    >>> value(x), value(3 * x + 1), dual(c)
    (2.0, 7.0, 3.0)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Hashable, Optional, Union

from .errors import ExpressionError, NoSolutionError
from .modeling.constraints import Constraint, ConstraintArray
from .modeling.expressions import Expression, as_expression, is_number
from .modeling.variables import Parameter, Variable, VariableArray

if TYPE_CHECKING:
    from .modeling.problem import Problem
    from .solvers.core import SolveResult, TerminationStatus


def _last_result(problem: "Problem") -> "SolveResult":
    result = problem.result
    if result is None:
        raise NoSolutionError(
            f"Problem {problem.name!r} has no solution: it was never solved or was modified since"
        )
    return result


def _solution(problem: "Problem") -> Dict[Variable, float]:
    result = _last_result(problem)
    if result.primal is None:
        raise NoSolutionError(
            f"Problem {problem.name!r} has no solution (status {result.status.value}: {result.message})"
        )
    return result.primal


def _owner(expr: Expression) -> Optional["Problem"]:
    for symbol in expr.symbols():
        return symbol.problem
    return None


def value(symbol: Any) -> Union[float, Dict[Hashable, float]]:
    """
    Value of a symbol in the last solution.

    Args:
        symbol: A Variable, Constraint (value of its left-hand side), a
            VariableArray or ConstraintArray (dict index -> value), a
            Parameter (its current value) or any expression.

    Raises:
        NoSolutionError: If no solution is available.
        UnregisteredSymbolError: If the symbol is not part of its problem.
    """
    if isinstance(symbol, Parameter):
        symbol.problem.require(symbol)
        return symbol.value
    if isinstance(symbol, Variable):
        symbol.problem.require(symbol)
        return _solution(symbol.problem)[symbol]
    if isinstance(symbol, Constraint):
        symbol.problem.require(symbol)
        return symbol.function.evaluate(_solution(symbol.problem))
    if isinstance(symbol, (VariableArray, ConstraintArray)):
        symbol.problem.require(symbol)
        return {key: value(element) for key, element in symbol.items()}
    if isinstance(symbol, Expression) or is_number(symbol):
        expr = as_expression(symbol)
        problem = _owner(expr)
        if problem is None:
            return expr.evaluate({})
        problem.require(expr)
        if expr.is_constant:
            return expr.evaluate({})
        return expr.evaluate(_solution(problem))
    raise ExpressionError(f"Cannot take the value of {type(symbol).__name__}")


def dual(constraint: Union[Constraint, ConstraintArray]) -> Union[float, Dict[Hashable, float]]:
    """
    Shadow price of a constraint: the rate of change of the optimal objective
    when the constraint's bounds are shifted upward.

    Raises:
        NoSolutionError: If there is no solution or the solver reported no
            duals (mixed-integer problems, ``slsqp``).
    """
    if isinstance(constraint, ConstraintArray):
        constraint.problem.require(constraint)
        return {key: dual(element) for key, element in constraint.items()}
    if not isinstance(constraint, Constraint):
        raise ExpressionError(f"dual() expects a Constraint, got {type(constraint).__name__}")
    problem = constraint.problem
    problem.require(constraint)
    _solution(problem)
    result = _last_result(problem)
    try:
        return result.dual[constraint]
    except KeyError:
        raise NoSolutionError(f"Solver {result.solver!r} reported no dual for {constraint.name!r}") from None


def reduced_cost(variable: Union[Variable, VariableArray]) -> Union[float, Dict[Hashable, float]]:
    """Dual of the bounds of ``variable``, with the sign convention of :func:`dual`."""
    if isinstance(variable, VariableArray):
        variable.problem.require(variable)
        return {key: reduced_cost(element) for key, element in variable.items()}
    if not isinstance(variable, Variable):
        raise ExpressionError(f"reduced_cost() expects a Variable, got {type(variable).__name__}")
    problem = variable.problem
    problem.require(variable)
    _solution(problem)
    result = _last_result(problem)
    try:
        return result.reduced_costs[variable]
    except KeyError:
        raise NoSolutionError(f"Solver {result.solver!r} reported no reduced cost for {variable.name!r}") from None


def objective_value(problem: "Problem") -> float:
    """Objective of the last solution, in the problem's own sense."""
    _solution(problem)
    result = _last_result(problem)
    if result.objective_value is None:
        raise NoSolutionError(f"Problem {problem.name!r} has no objective value")
    return result.objective_value


def termination_status(problem: "Problem") -> "TerminationStatus":
    return _last_result(problem).status


def has_values(problem: "Problem") -> bool:
    """True if the last solve left a primal solution that has not been invalidated."""
    result = problem.result
    return result is not None and result.has_values


def solve_time(problem: "Problem") -> float:
    return _last_result(problem).solve_time


__all__ = [
    "value",
    "dual",
    "reduced_cost",
    "objective_value",
    "termination_status",
    "has_values",
    "solve_time",
]
