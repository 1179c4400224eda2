"""
Example: Nonlinear programming

Solves the Rosenbrock function with and without a disk constraint, and a
small constrained least-squares problem whose multiplier is known in closed
form. Derivatives come from torch autograd; the solvers are SciPy's
trust-constr and SLSQP methods.
"""

import optmodel as om


def example_unconstrained():
    """Example: Rosenbrock valley from the classic starting point."""
    print("=" * 60)
    print("Example 1: Unconstrained Rosenbrock")
    print("=" * 60)

    problem = om.Problem("rosenbrock", solver="trust-constr")
    x = problem.register("x", start=-1.2)
    y = problem.register("y", start=1.0)
    problem.set_objective("min", (1 - x) ** 2 + 100 * (y - x**2) ** 2)

    result = problem.optimize(om.SolverOptions(max_iterations=2000))
    print(f"Status: {result.status.value}")
    if result.is_optimal:
        print(f"x = {om.value(x):.6f}, y = {om.value(y):.6f}")
        print(f"Objective: {om.objective_value(problem):.3e}")
        print(f"Iterations: {result.iterations}")
    print()


def example_disk():
    """Example: Rosenbrock restricted to the unit disk."""
    print("=" * 60)
    print("Example 2: Rosenbrock on the unit disk")
    print("=" * 60)

    problem = om.Problem("rosenbrock_disk", solver="slsqp")
    x = problem.register("x")
    y = problem.register("y")
    problem.set_objective("min", (1 - x) ** 2 + 100 * (y - x**2) ** 2)
    disk = problem.add_constraint("disk", x**2 + y**2 <= 1)

    result = problem.optimize()
    print(f"Status: {result.status.value}")
    if result.is_optimal:
        print(f"x = {om.value(x):.6f}, y = {om.value(y):.6f}")
        print(f"x^2 + y^2 = {om.value(disk):.6f}")
        print(f"Objective: {om.objective_value(problem):.6f}")
    print()


def example_multiplier():
    """Example: Closest point to the origin on a half-plane."""
    print("=" * 60)
    print("Example 3: Constraint multiplier")
    print("=" * 60)

    problem = om.Problem("closest_point", solver="trust-constr")
    x = problem.register("x")
    y = problem.register("y")
    problem.set_objective("min", x**2 + y**2)
    half_plane = problem.add_constraint("half_plane", x + y >= 2)

    result = problem.optimize()
    print(f"Status: {result.status.value}")
    if result.is_optimal:
        print(f"x = {om.value(x):.6f}, y = {om.value(y):.6f}")
        print(f"Objective: {om.objective_value(problem):.6f}")
        if result.has_duals:
            print(f"Dual of half_plane: {om.dual(half_plane):.6f}")
    print()


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("optmodel - Nonlinear Programming Examples")
    print("=" * 60 + "\n")

    example_unconstrained()
    example_disk()
    example_multiplier()

    print("=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)
