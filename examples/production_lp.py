"""
Example: Production planning as a linear program

Two products x and y are made at unit costs 12 and 20. Two resources
require at least 100 and 120 units of output mix. The example solves the
model with HiGHS, reads primal values and shadow prices, then changes
bounds and re-solves.
"""

import optmodel as om


def build_model() -> om.Problem:
    problem = om.Problem("production", solver="highs")
    x = problem.register("x", om.NonNegativeReals)
    y = problem.register("y", om.Interval(0, 3))
    problem.set_objective("min", 12 * x + 20 * y)
    problem.add_constraint("c1", 6 * x + 8 * y >= 100)
    problem.add_constraint("c2", 7 * x + 12 * y >= 120)
    return problem


def example_solve_and_query():
    """Example: Solve once and read values and duals."""
    print("=" * 60)
    print("Example 1: Solve and query")
    print("=" * 60)

    problem = build_model()
    result = problem.optimize()
    print(f"Status: {result.status.value}")
    if result.is_optimal:
        x, y = problem["x"], problem["y"]
        print(f"x = {om.value(x):.4f}, y = {om.value(y):.4f}")
        print(f"Optimal cost: {om.objective_value(problem):.4f}")
        for name in ("c1", "c2"):
            con = problem[name]
            print(f"  {name}: activity {om.value(con):.4f}, dual {om.dual(con):.4f}")
        print(f"KKT optimal: {om.is_kkt_optimal(problem)}")
    print()


def example_bound_changes():
    """Example: Re-solve after changing variable bounds."""
    print("=" * 60)
    print("Example 2: Bound changes")
    print("=" * 60)

    problem = build_model()
    y = problem["y"]
    problem.optimize()
    print(f"y <= 3:  cost {om.objective_value(problem):.4f}")

    # y is not at its upper bound, so widening it leaves the optimum alone
    y.set_upper_bound(30)
    problem.optimize()
    print(f"y <= 30: cost {om.objective_value(problem):.4f}")

    y.set_bounds(3, 30)
    problem.optimize()
    print(
        f"y >= 3:  cost {om.objective_value(problem):.4f} "
        f"(x = {om.value(problem['x']):.4f}, y = {om.value(y):.4f})"
    )
    print()


def example_infeasible():
    """Example: Infeasibility is a status, not an exception."""
    print("=" * 60)
    print("Example 3: Infeasible model")
    print("=" * 60)

    problem = om.Problem("infeasible", solver="highs")
    x = problem.register("x")
    problem.set_objective("min", x)
    problem.add_constraint("low", x >= 10)
    problem.add_constraint("high", x <= 0)
    result = problem.optimize()
    print(f"Status: {result.status.value}")
    try:
        om.value(x)
    except om.NoSolutionError as exc:
        print(f"value(x) raised NoSolutionError: {exc}")
    print()


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("optmodel - Linear Programming Examples")
    print("=" * 60 + "\n")

    example_solve_and_query()
    example_bound_changes()
    example_infeasible()

    print("=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)
