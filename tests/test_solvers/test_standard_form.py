"""Tests for compiling problems into matrix form."""

import math

import numpy as np
import pytest

from optmodel import Binary, NonNegativeReals, Problem, UnsupportedProblemError, interval, sin
from optmodel.modeling import Sense
from optmodel.solvers import compile_linear


def test_compile_production_problem(production_problem):
    form = compile_linear(production_problem)
    assert form.num_variables == 2
    assert form.num_rows == 2
    assert np.allclose(form.c, [12.0, 20.0])
    assert form.offset == 0.0
    assert np.allclose(form.matrix, [[6.0, 8.0], [7.0, 12.0]])
    assert np.allclose(form.row_lower, [100.0, 120.0])
    assert np.all(np.isinf(form.row_upper))
    assert np.allclose(form.lb, [0.0, 0.0])
    assert np.allclose(form.ub, [math.inf, 3.0])
    assert form.sense is Sense.MINIMIZE
    assert [var.name for var in form.variables] == ["x", "y"]


def test_objective_and_activity_helpers(production_problem):
    form = compile_linear(production_problem)
    point = np.array([15.0, 1.25])
    assert np.isclose(form.objective(point), 205.0)
    assert np.allclose(form.activity(point), [100.0, 120.0])


def test_constants_parameters_and_integrality():
    problem = Problem()
    price = problem.add_parameter("price", 3.0)
    x = problem.register("x", NonNegativeReals)
    b = problem.register("b", Binary)
    problem.set_objective("max", price * x - 2 * b + 7)
    problem.add_constraint("link", x - 4 * b <= 1)
    problem.add_constraint("band", interval(-1, x + b + 2, 5))

    form = compile_linear(problem)
    assert np.allclose(form.c, [3.0, -2.0])
    assert form.offset == 7.0
    assert form.sense is Sense.MAXIMIZE
    assert list(form.integrality) == [0, 1]
    assert np.allclose(form.row_lower, [-math.inf, -3.0])
    assert np.allclose(form.row_upper, [1.0, 3.0])

    price.value = 5.0
    assert np.allclose(compile_linear(problem).c, [5.0, -2.0])


def test_nonlinear_parts_are_rejected():
    problem = Problem()
    x = problem.register("x")
    problem.set_objective("min", x)
    problem.add_constraint("wave", sin(x) <= 0.5)
    with pytest.raises(UnsupportedProblemError):
        compile_linear(problem)

    other = Problem()
    y = other.register("y")
    other.set_objective("min", y * y)
    with pytest.raises(UnsupportedProblemError):
        compile_linear(other)
