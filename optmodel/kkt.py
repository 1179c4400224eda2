"""
Karush-Kuhn-Tucker diagnostics for solved linear programs.

With the dual convention of :func:`optmodel.dual` (rate of change of the
optimal objective when a bound is shifted upward) the conditions read, for
both senses::

    c = A^T y + r                      (stationarity)
    row_lower <= A x <= row_upper      (primal feasibility)
    lb <= x <= ub
    y_i * slack_i = 0, r_j * slack_j = 0   (complementary slackness)

together with sign conditions on ``y`` and ``r``: for a minimization a
multiplier may only be positive on an active lower bound and negative on an
active upper bound; maximization flips both.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

import numpy as np

from .errors import NoSolutionError
from .modeling.problem import Sense
from .solvers.standard_form import LinearForm, compile_linear
from .solvers.utils import bound_violation

if TYPE_CHECKING:
    from .modeling.problem import Problem


def _sign_violation(mult: np.ndarray, lower: np.ndarray, upper: np.ndarray, sense: Sense) -> float:
    if mult.size == 0:
        return 0.0
    orient = 1.0 if sense is Sense.MINIMIZE else -1.0
    scaled = orient * mult
    # positive scaled multipliers need a finite lower bound, negative ones a finite upper bound
    wrong = np.where(np.isfinite(lower), 0.0, np.maximum(scaled, 0.0))
    wrong = wrong + np.where(np.isfinite(upper), 0.0, np.maximum(-scaled, 0.0))
    return float(np.max(wrong))


def _complementarity(mult: np.ndarray, values: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> float:
    if mult.size == 0:
        return 0.0
    with np.errstate(invalid="ignore"):
        to_lower = np.where(np.isfinite(lower), np.abs(values - lower), np.inf)
        to_upper = np.where(np.isfinite(upper), np.abs(values - upper), np.inf)
        gap = np.abs(mult) * np.minimum(to_lower, to_upper)
    gap = np.where(mult == 0.0, 0.0, gap)
    return float(np.max(gap))


def _vectors(problem: "Problem", form: LinearForm):
    result = problem.result
    if result is None or result.primal is None:
        raise NoSolutionError(f"Problem {problem.name!r} has no solution to check")
    if form.num_rows and not result.has_duals:
        raise NoSolutionError(f"Solver {result.solver!r} reported no duals for problem {problem.name!r}")
    x = np.array([result.primal[var] for var in form.variables], dtype=float)
    y = np.array([result.dual.get(con, 0.0) for con in form.constraints], dtype=float)
    r = np.array([result.reduced_costs.get(var, 0.0) for var in form.variables], dtype=float)
    return x, y, r


def kkt_residuals(problem: "Problem") -> Dict[str, float]:
    """
    Infinity norms of the KKT residuals at the stored solution.

    Returns a dict with ``primal`` (bound and row violation), ``dual``
    (stationarity), ``dual_sign`` (multipliers of the wrong sign) and
    ``complementary`` (multiplier times distance to the nearest bound).

    Raises:
        UnsupportedProblemError: If the problem is not linear.
        NoSolutionError: Without a solution or without duals.
    """
    form = compile_linear(problem)
    x, y, r = _vectors(problem, form)
    activity = form.activity(x)

    stationarity = form.c - form.matrix.T @ y - r if form.num_variables else np.zeros(0)
    primal = max(
        bound_violation(x, form.lb, form.ub),
        bound_violation(activity, form.row_lower, form.row_upper),
    )
    dual_sign = max(
        _sign_violation(y, form.row_lower, form.row_upper, form.sense),
        _sign_violation(r, form.lb, form.ub, form.sense),
    )
    complementary = max(
        _complementarity(y, activity, form.row_lower, form.row_upper),
        _complementarity(r, x, form.lb, form.ub),
    )
    return {
        "primal": primal,
        "dual": float(np.linalg.norm(stationarity, ord=np.inf)) if stationarity.size else 0.0,
        "dual_sign": dual_sign,
        "complementary": complementary,
    }


def is_kkt_optimal(problem: "Problem", tol: float = 1e-6) -> bool:
    """
    Return True if all KKT residuals are below ``tol``.
    """

    residuals = kkt_residuals(problem)
    return all(value <= tol for value in residuals.values())


__all__ = ["kkt_residuals", "is_kkt_optimal"]
