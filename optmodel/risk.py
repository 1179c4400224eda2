"""
Risk measures over discrete scenarios.

Outcomes are given per scenario as expressions (or numbers) together with
scenario probabilities; equal weights are used when probabilities are
omitted. The functions return expressions to be used in objectives or
constraints. :func:`cvar` and :func:`worst_case` also register auxiliary
variables and constraints on the problem, so the problem stays linear when
the outcomes are linear.

Example:
    >>> import optmodel as om
    >>> p = om.Problem(solver="highs")
    >>> w = p.register("w", om.Interval(0, 1), index=["a", "b"])
    >>> budget = p.add_constraint("budget", w.sum() == 1)
    >>> losses = [w["a"] * 1.0 + w["b"] * 4.0, w["a"] * 5.0 + w["b"] * 2.0]
    >>> p.set_objective("min", om.cvar(p, "risk", losses, alpha=0.5))
    >>> round(p.optimize().objective_value, 6)
    3.0
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, List, Optional, Sequence

from .errors import DomainError
from .logging import get_logger
from .modeling.expressions import Expression, as_expression
from .modeling.functions import quicksum
from .modeling.variables import NonNegativeReals, Reals, Variable, element_name

if TYPE_CHECKING:
    from .modeling.problem import Problem

logger = get_logger(__name__)

PROBABILITY_TOLERANCE = 1e-9


def _outcomes(outcomes: Sequence[object]) -> List[Expression]:
    items = [as_expression(outcome) for outcome in outcomes]
    if not items:
        raise DomainError("At least one scenario outcome is required")
    return items


def _weights(n: int, probabilities: Optional[Sequence[float]]) -> List[float]:
    if probabilities is None:
        return [1.0 / n] * n
    weights = [float(p) for p in probabilities]
    if len(weights) != n:
        raise DomainError(f"Expected {n} probabilities, got {len(weights)}")
    for p in weights:
        if not math.isfinite(p) or p < 0.0:
            raise DomainError(f"Probabilities must be finite and non-negative, got {p}")
    total = sum(weights)
    if abs(total - 1.0) > PROBABILITY_TOLERANCE:
        raise DomainError(f"Probabilities must sum to 1, got {total}")
    return weights


def _reserve(
    problem: "Problem",
    names: Sequence[str],
    families: Sequence[str],
    outcomes: Sequence[Expression],
) -> None:
    # Everything is checked before the first registration so a failure leaves the problem untouched.
    for outcome in outcomes:
        problem.require(outcome)
    for name in names:
        problem._claim(name)
    for family in families:
        problem._claim_elements(family, [element_name(family, k) for k in range(len(outcomes))])


def expectation(outcomes: Sequence[object], probabilities: Optional[Sequence[float]] = None) -> Expression:
    """Expected value ``sum_k p_k X_k``."""
    items = _outcomes(outcomes)
    weights = _weights(len(items), probabilities)
    return quicksum(p * x for p, x in zip(weights, items))


def variance(outcomes: Sequence[object], probabilities: Optional[Sequence[float]] = None) -> Expression:
    """
    Variance ``sum_k p_k (X_k - E[X])**2``.

    The result is quadratic in the decision variables, so problems using it
    need a nonlinear solver.
    """
    items = _outcomes(outcomes)
    weights = _weights(len(items), probabilities)
    mean = quicksum(p * x for p, x in zip(weights, items))
    return quicksum(p * (x - mean) ** 2 for p, x in zip(weights, items) if p > 0.0)


def mean_variance(
    outcomes: Sequence[object],
    probabilities: Optional[Sequence[float]] = None,
    risk_aversion: float = 1.0,
) -> Expression:
    """
    Markowitz utility ``E[X] - risk_aversion * Var[X]`` of returns ``X``.

    Maximize it to trade expected return against variance.

    Raises:
        DomainError: If ``risk_aversion`` is negative.
    """
    risk_aversion = float(risk_aversion)
    if not math.isfinite(risk_aversion) or risk_aversion < 0.0:
        raise DomainError(f"risk_aversion must be non-negative, got {risk_aversion}")
    items = _outcomes(outcomes)
    weights = _weights(len(items), probabilities)
    mean = expectation(items, weights)
    if risk_aversion == 0.0:
        return mean
    return mean - risk_aversion * variance(items, weights)


def cvar(
    problem: "Problem",
    name: str,
    losses: Sequence[object],
    alpha: float,
    probabilities: Optional[Sequence[float]] = None,
) -> Expression:
    """
    Conditional value-at-risk of ``losses`` at level ``alpha``.

    Uses the Rockafellar-Uryasev formulation::

        CVaR = min_t  t + 1 / (1 - alpha) * sum_k p_k * max(L_k - t, 0)

    Registers ``{name}_var`` (the value-at-risk ``t``), the non-negative
    family ``{name}_excess`` and the constraint family ``{name}_tail``
    (``excess[k] >= L_k - t``). The returned expression equals the CVaR when
    minimized, or when bounded from above in a constraint.

    Args:
        problem: Problem receiving the auxiliary entities.
        name: Prefix for the auxiliary names.
        losses: Loss per scenario (larger is worse).
        alpha: Confidence level in ``[0, 1)``.
        probabilities: Scenario probabilities; uniform when omitted.

    Raises:
        DomainError: For ``alpha`` outside ``[0, 1)`` or bad probabilities.
        NameCollisionError: If one of the auxiliary names is taken.
    """
    alpha = float(alpha)
    if not 0.0 <= alpha < 1.0:
        raise DomainError(f"alpha must lie in [0, 1), got {alpha}")
    items = _outcomes(losses)
    weights = _weights(len(items), probabilities)
    var_name, excess_name, tail_name = f"{name}_var", f"{name}_excess", f"{name}_tail"
    _reserve(problem, (var_name, excess_name, tail_name), (excess_name, tail_name), items)

    threshold = problem.register(var_name, Reals)
    excess = problem.register(excess_name, NonNegativeReals, index=range(len(items)))
    problem.add_constraints(tail_name, [excess[k] >= loss - threshold for k, loss in enumerate(items)])
    logger.debug("%s: CVaR %s at alpha=%s over %d scenarios", problem.name, name, alpha, len(items))

    scale = 1.0 / (1.0 - alpha)
    return threshold + quicksum(scale * p * excess[k] for k, p in enumerate(weights) if p > 0.0)


def worst_case(problem: "Problem", name: str, losses: Sequence[object]) -> Variable:
    """
    Epigraph variable for ``max_k L_k``.

    Registers the variable ``name`` and the constraint family
    ``{name}_bound`` (``name >= L_k``). Minimizing the returned variable
    minimizes the worst-case loss.
    """
    items = _outcomes(losses)
    bound_name = f"{name}_bound"
    _reserve(problem, (name, bound_name), (bound_name,), items)
    level = problem.register(name, Reals)
    problem.add_constraints(bound_name, [level >= loss for loss in items])
    return level


__all__ = ["expectation", "variance", "mean_variance", "cvar", "worst_case"]
