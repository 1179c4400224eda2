"""
Example: Optimal control on a time grid

A rocket starts at rest on the ground and must reach a target altitude
with zero velocity at the final time, using as little fuel as possible.
The continuous dynamics

    h' = v,    v' = u - g,    0 <= u <= u_max

are discretized with explicit Euler steps. States and controls are
variable families over the time grid and the dynamics are constraint
families, so the model stays a linear program.
"""

import optmodel as om

GRAVITY = 1.0
MAX_THRUST = 3.0
TARGET_ALTITUDE = 10.0
HORIZON = 10.0
STEPS = 40


def build_model() -> om.Problem:
    dt = HORIZON / STEPS
    grid = range(STEPS + 1)
    controls = range(STEPS)

    problem = om.Problem("rocket", solver="highs")
    h = problem.register("h", om.NonNegativeReals, index=grid)
    v = problem.register("v", index=grid)
    u = problem.register("u", om.Interval(0.0, MAX_THRUST), index=controls)

    problem.add_constraint("h0", h[0] == 0)
    problem.add_constraint("v0", v[0] == 0)
    problem.add_constraints("altitude", {t: h[t + 1] == h[t] + dt * v[t] for t in controls})
    problem.add_constraints("velocity", {t: v[t + 1] == v[t] + dt * (u[t] - GRAVITY) for t in controls})
    problem.add_constraint("target", h[STEPS] >= TARGET_ALTITUDE)
    problem.add_constraint("rest", v[STEPS] == 0)

    problem.set_objective("min", dt * u.sum())
    return problem


def main() -> None:
    print("=" * 60)
    print("Fuel-optimal ascent")
    print("=" * 60)

    problem = build_model()
    om.print_problem_summary(problem)
    result = problem.optimize()
    print(f"\nStatus: {result.status.value}")
    if not result.is_optimal:
        return

    altitude = om.value(problem["h"])
    velocity = om.value(problem["v"])
    thrust = om.value(problem["u"])
    print(f"Fuel used: {om.objective_value(problem):.4f}")
    print(f"Final altitude: {altitude[STEPS]:.4f}, final velocity: {velocity[STEPS]:.4f}")
    print("t      h         v         u")
    for t in range(0, STEPS, 5):
        print(f"{t:<4d} {altitude[t]:8.4f}  {velocity[t]:8.4f}  {thrust[t]:8.4f}")

    # Shadow price of the altitude requirement: extra fuel per unit height
    print(f"Marginal fuel per unit altitude: {om.dual(problem['target']):.4f}")


if __name__ == "__main__":
    main()
