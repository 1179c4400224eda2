"""
Nonlinear programming adapter built on :func:`scipy.optimize.minimize`.

Two methods are exposed:

- ``"trust-constr"``: an interior-point / trust-region method that returns
  Lagrange multipliers; the default for nonlinear models.
- ``"slsqp"``: sequential least squares; fast on small smooth problems, no
  multipliers.

Derivatives are exact: the objective and every constraint function are
evaluated on ``torch`` tensors and differentiated with
:func:`torch.autograd.functional.jacobian` / ``hessian``. Linear constraints
are passed as :class:`scipy.optimize.LinearConstraint`.

Solutions are local. ``INFEASIBLE`` means the method converged to a point
that violates the constraints by more than the tolerance, which does not
prove that no feasible point exists.
"""

from __future__ import annotations

import math
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import numpy as np
import torch

from ..errors import SolverUnavailableError
from ..logging import get_logger
from ..modeling.expressions import DTYPE, Expression
from ..modeling.problem import Sense
from .core import SolveResult, SolverAdapter, SolverOptions, TerminationStatus
from .utils import bound_violation, project_box, push_into_interior

try:
    from scipy.optimize import Bounds, LinearConstraint, NonlinearConstraint, minimize

    SCIPY_AVAILABLE = True
except Exception:  # pragma: no cover - SciPy is optional at import time
    SCIPY_AVAILABLE = False
    Bounds = LinearConstraint = NonlinearConstraint = minimize = None

if TYPE_CHECKING:
    from ..modeling.constraints import Constraint
    from ..modeling.problem import Problem

logger = get_logger(__name__)

DEFAULT_TOLERANCE = 1e-6
# Objective values below -DIVERGENCE_LIMIT are treated as unboundedness.
DIVERGENCE_LIMIT = 1e20


class _TimeLimitReached(Exception):
    pass


class _ObjectiveDiverged(Exception):
    pass


class _EvaluationFailed(Exception):
    pass


def _compile(expr: Expression) -> Callable[[torch.Tensor], torch.Tensor]:
    def fn(x: torch.Tensor) -> torch.Tensor:
        return expr.to_tensor(lambda var: x[var.index])

    return fn


def _as_tensor(x: np.ndarray) -> torch.Tensor:
    return torch.as_tensor(np.asarray(x, dtype=float), dtype=DTYPE)


class _Clock:
    def __init__(self, limit: Optional[float]) -> None:
        self.start = time.perf_counter()
        self.limit = limit

    def check(self) -> None:
        if self.limit is not None and time.perf_counter() - self.start > self.limit:
            raise _TimeLimitReached()

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.start


class NlpSolver(SolverAdapter):
    """
    Local NLP solver for smooth problems.

    Args:
        method: ``"trust-constr"`` or ``"slsqp"``.
    """

    METHODS = ("trust-constr", "slsqp")

    def __init__(self, method: str = "trust-constr") -> None:
        method = method.lower()
        if method not in self.METHODS:
            raise ValueError(
                f"Unsupported NLP method {method!r}. Supported methods: {list(self.METHODS)}"
            )
        self.method = method
        self.name = method

    def is_available(self) -> bool:
        return SCIPY_AVAILABLE

    def supports(self, problem: "Problem") -> bool:
        return not problem.is_mixed_integer

    def solve(self, problem: "Problem", options: SolverOptions) -> SolveResult:
        if not SCIPY_AVAILABLE:  # pragma: no cover - depends on SciPy
            raise SolverUnavailableError("SciPy is not available; the NLP adapter cannot run")

        variables = problem.variables
        constraints = problem.constraints
        tol = options.tolerance if options.tolerance is not None else DEFAULT_TOLERANCE
        sign = 1.0 if problem.sense is Sense.MINIMIZE else -1.0
        clock = _Clock(options.time_limit)

        if not variables:
            return self._solve_empty(problem, tol)

        lb = np.array([var.lower for var in variables], dtype=float)
        ub = np.array([var.upper for var in variables], dtype=float)
        x0 = np.array([0.0 if var.start is None else var.start for var in variables], dtype=float)
        x0 = project_box(x0, lb, ub)
        if self.method == "trust-constr":
            x0 = push_into_interior(x0, lb, ub)

        objective = _compile(problem.objective)

        def f_torch(x: torch.Tensor) -> torch.Tensor:
            return sign * objective(x)

        def fun(x: np.ndarray) -> float:
            clock.check()
            value = float(f_torch(_as_tensor(x)))
            if value < -DIVERGENCE_LIMIT:
                raise _ObjectiveDiverged()
            if not math.isfinite(value):
                raise _EvaluationFailed(f"objective evaluated to {value} at x={x}")
            return value

        def jac(x: np.ndarray) -> np.ndarray:
            clock.check()
            grad = torch.autograd.functional.jacobian(f_torch, _as_tensor(x))
            return grad.detach().numpy().reshape(-1)

        def hess(x: np.ndarray) -> np.ndarray:
            return torch.autograd.functional.hessian(f_torch, _as_tensor(x)).detach().numpy()

        scipy_constraints = [self._constraint(con, len(variables)) for con in constraints]
        has_bounds = bool(np.isfinite(lb).any() or np.isfinite(ub).any())
        bounds = None
        if has_bounds:
            # trust-constr iterates stay inside non-degenerate boxes
            keep = (lb < ub) if self.method == "trust-constr" else False
            bounds = Bounds(lb, ub, keep_feasible=keep)

        kwargs: Dict[str, Any] = {"jac": jac, "bounds": bounds, "constraints": scipy_constraints}
        verbose = options.resolved_verbose()
        if self.method == "trust-constr":
            method_options: Dict[str, Any] = {"verbose": 2 if verbose else 0, "gtol": tol, "xtol": tol * 1e-2}
            kwargs["hess"] = hess
        else:
            method_options = {"disp": verbose, "ftol": tol * 1e-3}
        if options.max_iterations is not None:
            method_options["maxiter"] = int(options.max_iterations)
        method_options.update(options.extra)

        try:
            res = minimize(fun, x0, method=self.method, options=method_options, **kwargs)
        except _TimeLimitReached:
            return SolveResult.failed(
                TerminationStatus.TIMEOUT, "Time limit reached", self.name, solve_time=clock.elapsed
            )
        except _ObjectiveDiverged:
            return SolveResult.failed(
                TerminationStatus.UNBOUNDED,
                "Objective diverged; the problem appears unbounded",
                self.name,
                solve_time=clock.elapsed,
            )
        except (_EvaluationFailed, ValueError, ArithmeticError, RuntimeError, np.linalg.LinAlgError) as exc:
            logger.warning("%s failed on problem %s: %s", self.name, problem.name, exc)
            return SolveResult.failed(
                TerminationStatus.ERROR, f"Solver failed: {exc}", self.name, solve_time=clock.elapsed
            )

        x = np.asarray(res.x, dtype=float)
        violation = self._violation(x, lb, ub, constraints)
        status = self._status(res, violation, tol)
        iterations = getattr(res, "nit", None)
        if status is not TerminationStatus.OPTIMAL:
            message = f"{res.message} (max constraint violation {violation:.3g})"
            return SolveResult.failed(status, message, self.name, iterations=iterations, solve_time=clock.elapsed)

        primal = {var: float(x[j]) for j, var in enumerate(variables)}
        duals, reduced = self._multipliers(res, sign, variables, constraints, has_bounds)
        return SolveResult(
            status=status,
            message=str(res.message),
            solver=self.name,
            objective_value=problem.objective.evaluate(primal),
            primal=primal,
            dual=duals,
            reduced_costs=reduced,
            iterations=iterations,
            solve_time=clock.elapsed,
        )

    def _solve_empty(self, problem: "Problem", tol: float) -> SolveResult:
        values = np.array([con.function.evaluate({}) for con in problem.constraints])
        lower = np.array([con.lower for con in problem.constraints])
        upper = np.array([con.upper for con in problem.constraints])
        if bound_violation(values, lower, upper) > tol:
            return SolveResult.failed(TerminationStatus.INFEASIBLE, "Constant constraints are violated", self.name)
        return SolveResult(
            status=TerminationStatus.OPTIMAL,
            message="Trivial problem (no variables)",
            solver=self.name,
            objective_value=problem.objective.evaluate({}),
            primal={},
            iterations=0,
        )

    def _constraint(self, con: "Constraint", n: int):
        form = con.function.linear_form()
        if form is not None:
            row = np.zeros((1, n))
            for var, coef in form[0].items():
                row[0, var.index] += coef
            return LinearConstraint(row, con.lower - form[1], con.upper - form[1])

        g_torch = _compile(con.function)

        def g(x: np.ndarray) -> np.ndarray:
            return np.array([float(g_torch(_as_tensor(x)))])

        def g_jac(x: np.ndarray) -> np.ndarray:
            grad = torch.autograd.functional.jacobian(g_torch, _as_tensor(x))
            return grad.detach().numpy().reshape(1, n)

        def g_hess(x: np.ndarray, v: np.ndarray) -> np.ndarray:
            h = torch.autograd.functional.hessian(g_torch, _as_tensor(x)).detach().numpy()
            return float(v[0]) * h

        return NonlinearConstraint(g, con.lower, con.upper, jac=g_jac, hess=g_hess)

    @staticmethod
    def _violation(x: np.ndarray, lb: np.ndarray, ub: np.ndarray, constraints: List["Constraint"]) -> float:
        worst = bound_violation(x, lb, ub)
        if constraints:
            env = {}
            for con in constraints:
                for var in con.function.variables():
                    env[var] = x[var.index]
            rows = np.array([con.function.evaluate(env) for con in constraints])
            lower = np.array([con.lower for con in constraints])
            upper = np.array([con.upper for con in constraints])
            worst = max(worst, bound_violation(rows, lower, upper))
        return worst

    def _status(self, res: Any, violation: float, tol: float) -> TerminationStatus:
        code = int(getattr(res, "status", -1))
        if self.method == "trust-constr":
            if code == 0:
                return TerminationStatus.TIMEOUT
            if code in (1, 2):
                return TerminationStatus.OPTIMAL if violation <= tol else TerminationStatus.INFEASIBLE
            return TerminationStatus.ERROR
        # SLSQP exit modes
        if code == 0:
            return TerminationStatus.OPTIMAL if violation <= tol else TerminationStatus.INFEASIBLE
        if code == 9:
            return TerminationStatus.TIMEOUT
        if code == 4:
            return TerminationStatus.INFEASIBLE
        return TerminationStatus.ERROR

    def _multipliers(self, res: Any, sign: float, variables, constraints, has_bounds: bool):
        multipliers = getattr(res, "v", None)
        if self.method != "trust-constr" or multipliers is None:
            return {}, {}
        duals: Dict["Constraint", float] = {}
        for i, con in enumerate(constraints):
            if i < len(multipliers):
                duals[con] = -sign * float(np.asarray(multipliers[i]).reshape(-1)[0]) + 0.0
        reduced = {}
        if has_bounds and len(multipliers) == len(constraints) + 1:
            bound_v = np.asarray(multipliers[-1], dtype=float).reshape(-1)
            if bound_v.shape[0] == len(variables):
                reduced = {var: -sign * float(bound_v[j]) + 0.0 for j, var in enumerate(variables)}
        return duals, reduced


__all__ = ["NlpSolver", "SCIPY_AVAILABLE"]
