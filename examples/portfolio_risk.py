"""
Example: Portfolio selection under scenario risk

Three assets are described by their returns in five equally likely
scenarios. The example compares portfolios that minimize CVaR of the loss,
minimize the worst-case loss and maximize a mean-variance utility.
"""

import numpy as np

import optmodel as om

ASSETS = ["bonds", "stocks", "gold"]
# rows: scenarios, columns: assets
RETURNS = np.array(
    [
        [0.02, 0.12, -0.01],
        [0.03, 0.08, 0.02],
        [0.01, -0.10, 0.06],
        [0.02, 0.15, 0.00],
        [0.03, -0.05, 0.04],
    ]
)
TARGET_RETURN = 0.025


def build_portfolio(name: str, solver: str):
    problem = om.Problem(name, solver=solver)
    weights = problem.register("w", om.Interval(0.0, 1.0), index=ASSETS)
    problem.add_constraint("budget", weights.sum() == 1)
    returns = [
        om.quicksum(float(RETURNS[k, j]) * weights[asset] for j, asset in enumerate(ASSETS))
        for k in range(RETURNS.shape[0])
    ]
    return problem, weights, returns


def report(problem: om.Problem, weights) -> None:
    result = problem.result
    print(f"Status: {result.status.value}")
    if result.is_optimal:
        allocation = om.value(weights)
        print("Weights: " + ", ".join(f"{asset}={allocation[asset]:.3f}" for asset in ASSETS))
        print(f"Objective: {om.objective_value(problem):.6f}")
    print()


def example_cvar():
    """Example: Minimize CVaR at 80% subject to a return target."""
    print("=" * 60)
    print("Example 1: Minimum CVaR portfolio")
    print("=" * 60)

    problem, weights, returns = build_portfolio("min_cvar", "highs")
    losses = [-r for r in returns]
    problem.add_constraint("target", om.expectation(returns) >= TARGET_RETURN)
    problem.set_objective("min", om.cvar(problem, "cvar", losses, alpha=0.8))
    problem.optimize()
    report(problem, weights)


def example_worst_case():
    """Example: Minimize the largest loss over all scenarios."""
    print("=" * 60)
    print("Example 2: Minimax portfolio")
    print("=" * 60)

    problem, weights, returns = build_portfolio("minimax", "highs")
    worst = om.worst_case(problem, "worst", [-r for r in returns])
    problem.set_objective("min", worst)
    problem.optimize()
    report(problem, weights)


def example_mean_variance():
    """Example: Maximize expected return minus a variance penalty."""
    print("=" * 60)
    print("Example 3: Mean-variance portfolio")
    print("=" * 60)

    problem, weights, returns = build_portfolio("mean_variance", "trust-constr")
    problem.set_objective("max", om.mean_variance(returns, risk_aversion=5.0))
    problem.optimize()
    report(problem, weights)


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("optmodel - Risk Measure Examples")
    print("=" * 60 + "\n")

    example_cvar()
    example_worst_case()
    example_mean_variance()

    print("=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)
