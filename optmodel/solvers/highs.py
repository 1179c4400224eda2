"""
HiGHS adapter for linear and mixed-integer linear problems.

Continuous problems go through :func:`scipy.optimize.linprog` with
``method="highs"``, which also returns the marginals used for duals and
reduced costs. Problems with integer variables go through
:func:`scipy.optimize.milp` (branch and bound; no duals).

``linprog`` only accepts one-sided rows, so two-sided rows are split::

    row_lower <= a x <= row_upper   ->   a x <= row_upper,  -a x <= -row_lower

and the marginals of both halves are recombined into a single dual.
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Dict

import numpy as np

from ..errors import SolverUnavailableError
from ..logging import get_logger
from ..modeling.problem import Sense
from .core import SolveResult, SolverAdapter, SolverOptions, TerminationStatus
from .standard_form import LinearForm, compile_linear

try:
    from scipy.optimize import Bounds, LinearConstraint, linprog, milp

    SCIPY_AVAILABLE = True
except Exception:  # pragma: no cover - SciPy is optional at import time
    SCIPY_AVAILABLE = False
    Bounds = LinearConstraint = linprog = milp = None

if TYPE_CHECKING:
    from ..modeling.problem import Problem

logger = get_logger(__name__)

# scipy.optimize.linprog / milp status codes
_STATUS_MAP = {
    0: TerminationStatus.OPTIMAL,
    1: TerminationStatus.TIMEOUT,
    2: TerminationStatus.INFEASIBLE,
    3: TerminationStatus.UNBOUNDED,
    4: TerminationStatus.ERROR,
}


class HighsSolver(SolverAdapter):
    """LP/MILP adapter backed by the HiGHS solver shipped with SciPy."""

    name = "highs"

    def is_available(self) -> bool:
        return SCIPY_AVAILABLE

    def supports(self, problem: "Problem") -> bool:
        return problem.is_linear

    def solve(self, problem: "Problem", options: SolverOptions) -> SolveResult:
        if not SCIPY_AVAILABLE:  # pragma: no cover - depends on SciPy
            raise SolverUnavailableError("SciPy is not available; the HiGHS adapter cannot run")
        form = compile_linear(problem)
        if form.num_variables == 0:
            return self._solve_empty(form)
        start = time.perf_counter()
        if form.integrality.any():
            result = self._solve_milp(form, options)
        else:
            result = self._solve_lp(form, options)
        return _with_time(result, time.perf_counter() - start)

    def _highs_options(self, options: SolverOptions, mip: bool) -> Dict[str, Any]:
        opts: Dict[str, Any] = {"disp": options.resolved_verbose(), "presolve": True}
        if options.time_limit is not None:
            opts["time_limit"] = float(options.time_limit)
        if options.max_iterations is not None:
            opts["node_limit" if mip else "maxiter"] = int(options.max_iterations)
        if options.tolerance is not None and not mip:
            opts["primal_feasibility_tolerance"] = float(options.tolerance)
            opts["dual_feasibility_tolerance"] = float(options.tolerance)
        opts.update(options.extra)
        return opts

    def _solve_empty(self, form: LinearForm) -> SolveResult:
        # Without variables every row is the constant 0.
        feasible = bool(np.all(form.row_lower <= 0.0) and np.all(form.row_upper >= 0.0))
        if not feasible:
            return SolveResult.failed(
                TerminationStatus.INFEASIBLE, "Constant constraints are violated", self.name
            )
        return SolveResult(
            status=TerminationStatus.OPTIMAL,
            message="Trivial problem (no variables)",
            solver=self.name,
            objective_value=form.offset,
            primal={},
            dual={con: 0.0 for con in form.constraints},
            iterations=0,
        )

    def _solve_lp(self, form: LinearForm, options: SolverOptions) -> SolveResult:
        sign = 1.0 if form.sense is Sense.MINIMIZE else -1.0
        lower_finite = np.isfinite(form.row_lower)
        upper_finite = np.isfinite(form.row_upper)
        eq_rows = np.flatnonzero(lower_finite & upper_finite & (form.row_lower == form.row_upper))
        is_eq = np.zeros(form.num_rows, dtype=bool)
        is_eq[eq_rows] = True
        ub_rows = np.flatnonzero(upper_finite & ~is_eq)
        lb_rows = np.flatnonzero(lower_finite & ~is_eq)

        a_ub = None
        b_ub = None
        if ub_rows.size or lb_rows.size:
            a_ub = np.vstack([form.matrix[ub_rows], -form.matrix[lb_rows]])
            b_ub = np.concatenate([form.row_upper[ub_rows], -form.row_lower[lb_rows]])
        a_eq = form.matrix[eq_rows] if eq_rows.size else None
        b_eq = form.row_lower[eq_rows] if eq_rows.size else None

        try:
            res = linprog(
                c=sign * form.c,
                A_ub=a_ub,
                b_ub=b_ub,
                A_eq=a_eq,
                b_eq=b_eq,
                bounds=np.column_stack([form.lb, form.ub]),
                method="highs",
                options=self._highs_options(options, mip=False),
            )
        except ValueError as exc:
            logger.warning("linprog rejected the problem: %s", exc)
            return SolveResult.failed(TerminationStatus.ERROR, str(exc), self.name)

        status = _STATUS_MAP.get(res.status, TerminationStatus.ERROR)
        if status is not TerminationStatus.OPTIMAL or res.x is None:
            return SolveResult.failed(status, str(res.message), self.name, iterations=getattr(res, "nit", None))

        x = np.asarray(res.x, dtype=float)
        duals = np.zeros(form.num_rows)
        ineq = getattr(res, "ineqlin", None)
        if ineq is not None and a_ub is not None:
            marginals = np.asarray(ineq.marginals, dtype=float)
            duals[ub_rows] += marginals[: ub_rows.size]
            duals[lb_rows] -= marginals[ub_rows.size:]
        eqlin = getattr(res, "eqlin", None)
        if eqlin is not None and a_eq is not None:
            duals[eq_rows] += np.asarray(eqlin.marginals, dtype=float)
        duals *= sign

        reduced = np.zeros(form.num_variables)
        for side in ("lower", "upper"):
            block = getattr(res, side, None)
            if block is not None:
                reduced += np.asarray(block.marginals, dtype=float)
        reduced *= sign

        return SolveResult(
            status=status,
            message=str(res.message),
            solver=self.name,
            objective_value=form.objective(x),
            primal={var: float(x[j]) for j, var in enumerate(form.variables)},
            dual={con: float(duals[i]) + 0.0 for i, con in enumerate(form.constraints)},
            reduced_costs={var: float(reduced[j]) + 0.0 for j, var in enumerate(form.variables)},
            iterations=getattr(res, "nit", None),
        )

    def _solve_milp(self, form: LinearForm, options: SolverOptions) -> SolveResult:
        sign = 1.0 if form.sense is Sense.MINIMIZE else -1.0
        constraints = None
        if form.num_rows:
            constraints = LinearConstraint(form.matrix, form.row_lower, form.row_upper)
        try:
            res = milp(
                c=sign * form.c,
                integrality=form.integrality,
                bounds=Bounds(form.lb, form.ub),
                constraints=constraints,
                options=self._highs_options(options, mip=True),
            )
        except ValueError as exc:
            logger.warning("milp rejected the problem: %s", exc)
            return SolveResult.failed(TerminationStatus.ERROR, str(exc), self.name)

        status = _milp_status(res)
        if res.x is None:
            return SolveResult.failed(status, str(res.message), self.name)
        x = np.asarray(res.x, dtype=float)
        x[form.integrality == 1] = np.round(x[form.integrality == 1])
        point = {var: float(x[j]) for j, var in enumerate(form.variables)}
        nodes = getattr(res, "mip_node_count", None)
        if status is not TerminationStatus.OPTIMAL:
            # A limit may stop the search with a feasible incumbent in hand.
            return SolveResult.failed(status, str(res.message), self.name, iterations=nodes, incumbent=point)
        return SolveResult(
            status=status,
            message=str(res.message),
            solver=self.name,
            objective_value=form.objective(x),
            primal=point,
            iterations=nodes,
        )


def _milp_status(res: Any) -> TerminationStatus:
    status = _STATUS_MAP.get(res.status, TerminationStatus.ERROR)
    # milp reports HiGHS node and solution limits as "other" (status 4)
    if status is TerminationStatus.ERROR and "limit reached" in str(res.message).lower():
        return TerminationStatus.TIMEOUT
    return status


def _with_time(result: SolveResult, elapsed: float) -> SolveResult:
    return replace(result, solve_time=elapsed)


__all__ = ["HighsSolver", "SCIPY_AVAILABLE"]
