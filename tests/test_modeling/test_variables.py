"""Tests for domains, variables, parameters and indexed families."""

import math

import pytest

from optmodel import (
    Binary,
    Domain,
    DomainError,
    Integers,
    Interval,
    NonNegativeReals,
    Problem,
    Reals,
    UnregisteredSymbolError,
)


def test_predefined_domains():
    assert (Reals.lower, Reals.upper, Reals.integer) == (-math.inf, math.inf, False)
    assert NonNegativeReals.lower == 0.0
    assert Integers.integer
    assert (Binary.lower, Binary.upper, Binary.integer) == (0.0, 1.0, True)
    assert Interval(-1, 2) == Domain(-1.0, 2.0)


@pytest.mark.parametrize(
    "lower, upper",
    [(2.0, 1.0), (math.inf, math.inf), (-math.inf, -math.inf), (float("nan"), 1.0), ("0", 1.0)],
)
def test_invalid_domains(lower, upper):
    with pytest.raises(DomainError):
        Domain(lower, upper)


def test_domain_contains():
    assert Interval(0, 1).contains(0.5)
    assert not Interval(0, 1).contains(1.5)
    assert Binary.contains(1.0)
    assert not Binary.contains(0.5)


def test_register_scalar_variable():
    problem = Problem()
    x = problem.register("x", Interval(0, 10), start=2.0)
    assert x.name == "x"
    assert x.problem is problem
    assert (x.lower, x.upper, x.start) == (0.0, 10.0, 2.0)
    assert not x.is_integer
    assert x.domain == Interval(0, 10)


def test_start_outside_bounds_is_rejected():
    problem = Problem()
    with pytest.raises(DomainError):
        problem.register("x", NonNegativeReals, start=-1.0)
    x = problem.register("y", Interval(0, 1))
    with pytest.raises(DomainError):
        x.set_start(2.0)


def test_bound_updates():
    problem = Problem()
    y = problem.register("y", Interval(0, 3))
    y.set_upper_bound(30)
    assert y.upper == 30.0
    y.set_lower_bound(-1)
    assert y.lower == -1.0
    with pytest.raises(DomainError):
        y.set_bounds(5, 4)
    assert (y.lower, y.upper) == (-1.0, 30.0)


def test_fix_and_unfix():
    problem = Problem()
    x = problem.register("x", Interval(0, 10))
    x.fix(4)
    assert x.is_fixed
    assert x.lower == x.upper == 4.0
    x.unfix()
    assert not x.is_fixed
    assert (x.lower, x.upper) == (0.0, 10.0)
    with pytest.raises(DomainError):
        x.fix(math.inf)


def test_variable_family_over_time_grid():
    problem = Problem()
    h = problem.register("h", NonNegativeReals, index=range(4), start={0: 1.0, 3: 2.0})
    assert len(h) == 4
    assert list(h) == [0, 1, 2, 3]
    assert h[0].name == "h[0]"
    assert h[0].start == 1.0 and h[1].start is None and h[3].start == 2.0
    assert problem.num_variables == 4
    assert [var.index for var in problem.variables] == [0, 1, 2, 3]
    assert h.sum().linear_form() == ({h[t]: 1.0 for t in range(4)}, 0.0)


def test_variable_family_with_tuple_keys():
    problem = Problem()
    flow = problem.register("flow", index=[("a", "b"), ("b", "c")])
    assert flow["a", "b"].name == "flow[a,b]"


def test_family_missing_index():
    problem = Problem()
    x = problem.register("x", index=range(2))
    with pytest.raises(UnregisteredSymbolError):
        x[5]


def test_parameter_value_update():
    problem = Problem()
    p = problem.add_parameter("p", 2.5)
    x = problem.register("x")
    expr = p * x + p
    assert expr.linear_form() == ({x: 2.5}, 2.5)
    p.value = 4
    assert p.value == 4.0
    assert expr.linear_form() == ({x: 4.0}, 4.0)
    with pytest.raises(DomainError):
        p.value = float("nan")
