"""Tests for problem summaries."""

import io

from optmodel import Binary, Interval, Problem, interval, print_problem_summary, problem_summary, sin


def test_summary_of_unsolved_problem(production_problem):
    summary = problem_summary(production_problem)
    assert summary["name"] == "production"
    assert summary["sense"] == "minimize"
    assert summary["n_variables"] == 2
    assert summary["n_integer_variables"] == 0
    assert summary["n_constraints"] == 2
    assert summary["constraint_kinds"] == {"inequality": 2}
    assert summary["is_linear"] is True
    assert summary["is_mixed_integer"] is False
    assert summary["status"] is None
    assert summary["objective_value"] is None


def test_summary_after_solve(production_problem):
    production_problem.optimize()
    summary = problem_summary(production_problem)
    assert summary["status"] == "optimal"
    assert abs(summary["objective_value"] - 205.0) < 1e-6


def test_summary_counts_structure():
    problem = Problem("mixed")
    x = problem.register("x", Interval(-1, 1))
    b = problem.register("b", Binary)
    f = problem.register("f")
    f.fix(2.0)
    problem.add_parameter("scale", 3.0)
    problem.set_objective("max", x + b + f)
    problem.add_constraint("eq", x + b == 1)
    problem.add_constraint("band", interval(0, x + f, 4))
    problem.add_constraint("wave", sin(x) <= 0.5)

    summary = problem_summary(problem)
    assert summary["sense"] == "maximize"
    assert summary["n_variables"] == 3
    assert summary["n_integer_variables"] == 1
    assert summary["n_fixed_variables"] == 1
    assert summary["constraint_kinds"] == {"equality": 1, "range": 1, "inequality": 1}
    assert summary["n_nonlinear_constraints"] == 1
    assert summary["n_parameters"] == 1
    assert summary["is_linear"] is False
    assert summary["is_mixed_integer"] is True


def test_print_problem_summary(production_problem):
    buffer = io.StringIO()
    print_problem_summary(production_problem, file=buffer)
    text = buffer.getvalue()
    assert "Problem Summary: production" in text
    assert "Variables: 2" in text
    assert "Status: not solved" in text

    production_problem.optimize()
    buffer = io.StringIO()
    print_problem_summary(production_problem, file=buffer)
    assert "Objective: 205" in buffer.getvalue()
