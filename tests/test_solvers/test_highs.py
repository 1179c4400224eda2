"""Tests for the HiGHS LP/MILP adapter."""

import numpy as np
import pytest

from optmodel import (
    Binary,
    Interval,
    NonNegativeIntegers,
    NonNegativeReals,
    NoSolutionError,
    Problem,
    UnsupportedProblemError,
    dual,
    exp,
    interval,
    objective_value,
    reduced_cost,
    value,
)
from optmodel.solvers import HighsSolver, SolverOptions, TerminationStatus


def test_production_lp(production_problem):
    problem = production_problem
    result = problem.optimize()
    assert result.status is TerminationStatus.OPTIMAL
    assert result.solver == "highs"
    assert np.isclose(result.objective_value, 205.0)
    assert np.isclose(value(problem["x"]), 15.0)
    assert np.isclose(value(problem["y"]), 1.25)
    assert result.solve_time >= 0.0


def test_production_lp_duals(production_problem):
    problem = production_problem
    problem.optimize()
    assert np.isclose(dual(problem["c1"]), 0.25)
    assert np.isclose(dual(problem["c2"]), 1.5)
    assert np.isclose(reduced_cost(problem["x"]), 0.0, atol=1e-9)
    assert np.isclose(reduced_cost(problem["y"]), 0.0, atol=1e-9)


def test_dual_predicts_rhs_change(production_problem):
    problem = production_problem
    problem.optimize()
    predicted = objective_value(problem) + dual(problem["c1"])
    problem["c1"].set_bounds(lower=101)
    problem.optimize()
    assert np.isclose(objective_value(problem), predicted)


def test_resolve_after_bound_change(production_problem):
    problem = production_problem
    y = problem["y"]
    problem.optimize()
    assert np.isclose(objective_value(problem), 205.0)

    # The upper bound of y is slack at the optimum: widening it changes nothing.
    y.set_upper_bound(30)
    problem.optimize()
    assert np.isclose(objective_value(problem), 205.0)

    y.set_lower_bound(3)
    problem.optimize()
    assert np.isclose(objective_value(problem), 212.0)
    assert np.isclose(value(problem["x"]), 76.0 / 6.0)
    assert np.isclose(value(y), 3.0)


def test_fixed_variable(production_problem):
    problem = production_problem
    problem["y"].fix(3)
    problem.optimize()
    assert np.isclose(objective_value(problem), 212.0)
    problem["y"].unfix()
    problem.optimize()
    assert np.isclose(objective_value(problem), 205.0)


def test_parameter_change_is_picked_up_on_resolve():
    problem = Problem(solver="highs")
    demand = problem.add_parameter("demand", 4.0)
    x = problem.register("x", NonNegativeReals)
    problem.set_objective("min", 2 * x)
    problem.add_constraint("meet", x >= demand)
    problem.optimize()
    assert np.isclose(value(x), 4.0)
    demand.value = 7.0
    problem.optimize()
    assert np.isclose(value(x), 7.0)
    assert np.isclose(objective_value(problem), 14.0)


def test_maximize_duals_follow_objective_direction():
    problem = Problem(solver="highs")
    x = problem.register("x", NonNegativeReals)
    y = problem.register("y", NonNegativeReals)
    problem.set_objective("max", 3 * x + 5 * y)
    c1 = problem.add_constraint("c1", x + 2 * y <= 4)
    c2 = problem.add_constraint("c2", 3 * x + 2 * y <= 6)
    result = problem.optimize()
    assert result.status is TerminationStatus.OPTIMAL
    assert np.isclose(result.objective_value, 10.5)
    assert np.allclose([value(x), value(y)], [1.0, 1.5])
    assert np.isclose(dual(c1), 2.25)
    assert np.isclose(dual(c2), 0.25)


def test_equality_and_range_rows():
    problem = Problem(solver="highs")
    x = problem.register("x", NonNegativeReals)
    y = problem.register("y", NonNegativeReals)
    problem.set_objective("min", x + y + 10)
    rng_row = problem.add_constraint("range", interval(2, x + y, 4))
    eq_row = problem.add_constraint("balance", x - y == 0)
    problem.optimize()
    assert np.allclose([value(x), value(y)], [1.0, 1.0])
    assert np.isclose(objective_value(problem), 12.0)
    assert np.isclose(dual(rng_row), 1.0)
    assert np.isclose(dual(eq_row), 0.0, atol=1e-9)


def test_reduced_cost_of_variable_at_bound():
    problem = Problem(solver="highs")
    x = problem.register("x", NonNegativeReals)
    y = problem.register("y", NonNegativeReals)
    problem.set_objective("min", x + 2 * y)
    cover = problem.add_constraint("cover", x + y >= 1)
    problem.optimize()
    assert np.isclose(value(y), 0.0)
    assert np.isclose(dual(cover), 1.0)
    assert np.isclose(reduced_cost(y), 1.0)
    assert np.isclose(reduced_cost(x), 0.0, atol=1e-9)


def test_infeasible():
    problem = Problem(solver="highs")
    x = problem.register("x")
    problem.set_objective("min", x)
    problem.add_constraint("low", x >= 10)
    problem.add_constraint("high", x <= 0)
    result = problem.optimize()
    assert result.status is TerminationStatus.INFEASIBLE
    assert not result.has_values
    with pytest.raises(NoSolutionError):
        value(x)


def test_unbounded():
    problem = Problem(solver="highs")
    x = problem.register("x", NonNegativeReals)
    y = problem.register("y", NonNegativeReals)
    problem.set_objective("max", x + y)
    problem.add_constraint("c", x - y <= 1)
    result = problem.optimize()
    assert result.status is TerminationStatus.UNBOUNDED
    assert result.objective_value is None


def test_integer_program():
    problem = Problem(solver="highs")
    x = problem.register("x", NonNegativeIntegers)
    y = problem.register("y", NonNegativeIntegers)
    problem.set_objective("max", x + y)
    cap = problem.add_constraint("cap", 2 * x + 2 * y <= 7)
    result = problem.optimize()
    assert result.status is TerminationStatus.OPTIMAL
    assert np.isclose(result.objective_value, 3.0)
    assert float(value(x)).is_integer() and float(value(y)).is_integer()
    assert not result.has_duals
    with pytest.raises(NoSolutionError):
        dual(cap)


def test_knapsack():
    weights = {"a": 2, "b": 3, "c": 4, "d": 5}
    values = {"a": 3, "b": 4, "c": 5, "d": 6}
    problem = Problem("knapsack", solver="highs")
    take = problem.register("take", Binary, index=weights)
    problem.set_objective("max", sum(values[k] * take[k] for k in weights))
    problem.add_constraint("weight", sum(weights[k] * take[k] for k in weights) <= 5)
    problem.optimize()
    assert np.isclose(objective_value(problem), 7.0)
    chosen = {k for k, v in value(take).items() if v > 0.5}
    assert chosen == {"a", "b"}


def test_node_limit_is_timeout_without_values(rng):
    weights = rng.integers(10, 100, size=60)
    problem = Problem("big_knapsack", solver="highs")
    take = problem.register("take", Binary, index=range(60))
    problem.set_objective("max", sum(int(weights[k] + 10) * take[k] for k in range(60)))
    problem.add_constraint("weight", sum(int(weights[k]) * take[k] for k in range(60)) <= int(weights.sum()) // 2)
    result = problem.optimize(SolverOptions(max_iterations=1, extra={"presolve": False}))
    assert result.status is TerminationStatus.TIMEOUT
    assert not result.has_values
    assert result.objective_value is None
    if result.incumbent is not None:
        assert set(result.incumbent) == set(take.values())
    with pytest.raises(NoSolutionError):
        value(take[0])
    with pytest.raises(NoSolutionError):
        objective_value(problem)


def test_problem_without_variables():
    problem = Problem(solver="highs")
    problem.set_objective("min", 5)
    result = problem.optimize()
    assert result.status is TerminationStatus.OPTIMAL
    assert result.objective_value == 5.0


def test_nonlinear_problem_is_rejected():
    problem = Problem(solver="highs")
    x = problem.register("x", Interval(0, 1))
    problem.set_objective("min", exp(x))
    with pytest.raises(UnsupportedProblemError):
        problem.optimize()
    assert problem.result is None


def test_option_translation():
    options = SolverOptions(time_limit=5.0, max_iterations=10, tolerance=1e-7, verbose=False, extra={"presolve": False})
    lp = HighsSolver()._highs_options(options, mip=False)
    assert lp["time_limit"] == 5.0
    assert lp["maxiter"] == 10
    assert lp["primal_feasibility_tolerance"] == 1e-7
    assert lp["disp"] is False
    assert lp["presolve"] is False
    mip = HighsSolver()._highs_options(options, mip=True)
    assert mip["node_limit"] == 10
    assert "maxiter" not in mip
