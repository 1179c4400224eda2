"""Tests for scenario risk measures."""

import numpy as np
import pytest

from optmodel import (
    DomainError,
    Interval,
    NameCollisionError,
    Problem,
    UnregisteredSymbolError,
    cvar,
    expectation,
    mean_variance,
    value,
    variance,
    worst_case,
)
from optmodel.solvers import TerminationStatus


def two_asset_problem(solver="highs"):
    problem = Problem("portfolio", solver=solver)
    w = problem.register("w", Interval(0, 1), index=["a", "b"])
    problem.add_constraint("budget", w.sum() == 1)
    return problem, w


def test_expectation_and_variance_of_constants():
    assert np.isclose(value(expectation([1.0, 2.0, 3.0])), 2.0)
    assert np.isclose(value(variance([1.0, 2.0, 3.0])), 2.0 / 3.0)
    assert np.isclose(value(expectation([1.0, 3.0], [0.25, 0.75])), 2.5)
    assert np.isclose(value(variance([1.0, 2.0, 100.0], [0.5, 0.5, 0.0])), 0.25)


@pytest.mark.parametrize(
    "probabilities",
    [[0.5], [0.5, 0.6], [1.5, -0.5], [float("nan"), 1.0]],
)
def test_invalid_probabilities(probabilities):
    with pytest.raises(DomainError):
        expectation([1.0, 2.0], probabilities)


def test_empty_outcomes():
    with pytest.raises(DomainError):
        expectation([])


def test_cvar_of_portfolio():
    problem, w = two_asset_problem()
    losses = [w["a"] * 1.0 + w["b"] * 4.0, w["a"] * 5.0 + w["b"] * 2.0]
    risk = cvar(problem, "risk", losses, alpha=0.5)
    problem.set_objective("min", risk)
    result = problem.optimize()
    assert result.status is TerminationStatus.OPTIMAL
    assert np.isclose(result.objective_value, 3.0)
    assert np.isclose(value(w["a"]), 1.0 / 3.0)
    assert {"risk_var", "risk_excess", "risk_tail"} <= set(problem.names)
    assert problem.is_linear


def test_cvar_with_weighted_scenarios():
    problem = Problem(solver="highs")
    problem.set_objective("min", cvar(problem, "tail", [1.0, 3.0], alpha=0.5, probabilities=[0.75, 0.25]))
    problem.optimize()
    assert np.isclose(value(problem.objective), 2.0)


def test_cvar_at_zero_level_is_the_expectation():
    problem = Problem(solver="highs")
    problem.set_objective("min", cvar(problem, "tail", [1.0, 3.0], alpha=0.0))
    problem.optimize()
    assert np.isclose(value(problem.objective), 2.0)


@pytest.mark.parametrize("alpha", [-0.1, 1.0, 1.5])
def test_cvar_level_out_of_range(alpha):
    problem = Problem()
    with pytest.raises(DomainError):
        cvar(problem, "risk", [1.0, 2.0], alpha=alpha)
    assert problem.names == []


def test_cvar_name_collision_leaves_problem_untouched():
    problem = Problem()
    problem.register("risk_excess")
    with pytest.raises(NameCollisionError):
        cvar(problem, "risk", [1.0, 2.0], alpha=0.5)
    assert "risk_var" not in problem
    assert problem.num_variables == 1


def test_cvar_element_collision_leaves_problem_untouched():
    problem = Problem()
    x = problem.register("x")
    problem.register("risk_excess[1]")
    with pytest.raises(NameCollisionError):
        cvar(problem, "risk", [x, 2 * x], alpha=0.5)
    problem.add_constraint("risk_tail[0]", x >= 0)
    with pytest.raises(NameCollisionError):
        cvar(problem, "risk", [x], alpha=0.5)
    assert "risk_var" not in problem
    assert problem.num_variables == 2
    assert problem.num_constraints == 1


def test_foreign_losses_leave_problem_untouched():
    problem = Problem()
    other = Problem("other")
    z = other.register("z")
    with pytest.raises(UnregisteredSymbolError):
        cvar(problem, "risk", [z, 2 * z], alpha=0.5)
    with pytest.raises(UnregisteredSymbolError):
        worst_case(problem, "worst", [1.0, z])
    assert problem.names == []


def test_worst_case_minimax():
    problem, w = two_asset_problem()
    losses = [w["a"] * 1.0 + w["b"] * 4.0, w["a"] * 5.0 + w["b"] * 2.0]
    level = worst_case(problem, "worst", losses)
    problem.set_objective("min", level)
    problem.optimize()
    assert np.isclose(value(level), 3.0)
    assert len(value(problem["worst_bound"])) == 2


def test_mean_variance_portfolio():
    problem, w = two_asset_problem(solver="trust-constr")
    returns = [w["a"] * 0.1 + w["b"] * 0.4, w["a"] * 0.1 + w["b"] * 0.0]
    problem.set_objective("max", mean_variance(returns, risk_aversion=2.5))
    result = problem.optimize()
    assert result.status is TerminationStatus.OPTIMAL
    assert np.isclose(value(w["b"]), 0.5, atol=1e-3)
    assert np.isclose(result.objective_value, 0.125, atol=1e-5)


def test_mean_variance_without_risk_aversion_is_linear():
    problem, w = two_asset_problem()
    returns = [w["a"] * 0.1 + w["b"] * 0.4, w["a"] * 0.1 + w["b"] * 0.0]
    problem.set_objective("max", mean_variance(returns, risk_aversion=0.0))
    assert problem.is_linear
    problem.optimize()
    assert np.isclose(value(w["b"]), 1.0)


def test_negative_risk_aversion():
    with pytest.raises(DomainError):
        mean_variance([1.0, 2.0], risk_aversion=-1.0)
