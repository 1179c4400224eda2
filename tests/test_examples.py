"""Smoke tests for example scripts.

These tests run each example script in a fresh interpreter and check that it
exits cleanly and prints its headline result.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

# Determine the repo root
ROOT = Path(__file__).resolve().parents[1]


def run_example(name: str) -> subprocess.CompletedProcess:
    script = ROOT / "examples" / name
    assert script.exists(), f"Example script not found: {script}"

    result = subprocess.run(
        [sys.executable, str(script)],
        capture_output=True,
        text=True,
        check=False,
        timeout=30,  # Should complete in seconds
    )

    assert result.returncode == 0, (
        f"Example script failed with return code {result.returncode}.\n"
        f"STDOUT:\n{result.stdout}\n"
        f"STDERR:\n{result.stderr}"
    )
    return result


def test_production_lp_example_runs() -> None:
    """Test that examples/production_lp.py runs and reports the optimal cost."""
    result = run_example("production_lp.py")
    assert "Optimal cost: 205.0000" in result.stdout
    assert "KKT optimal: True" in result.stdout
    assert "Status: infeasible" in result.stdout


def test_rocket_control_example_runs() -> None:
    result = run_example("rocket_control.py")
    assert "Status: optimal" in result.stdout
    assert "Fuel used" in result.stdout
    assert "Marginal fuel per unit altitude" in result.stdout


@pytest.mark.parametrize("name", ["rosenbrock_nlp.py", "portfolio_risk.py"])
def test_multi_part_examples_run(name: str) -> None:
    result = run_example(name)
    assert "All examples completed successfully!" in result.stdout, (
        "Expected output message not found in script output"
    )
