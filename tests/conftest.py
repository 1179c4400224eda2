"""Pytest configuration and shared fixtures for optmodel tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Isolation of process-wide settings between tests
"""

import os

import numpy as np
import pytest
import torch

from optmodel import settings


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    np.random.seed(seed)
    torch.manual_seed(seed)


@pytest.fixture(scope="function", autouse=True)
def restore_settings():
    """Undo changes to the verbose flag and default solver made by a test."""
    verbose = settings.is_verbose()
    solver = settings.get_default_solver()
    yield
    settings.set_verbose(verbose)
    settings.set_default_solver(solver)


@pytest.fixture
def production_problem():
    """The two-product LP: min 12x + 20y, optimum 205 at (15, 1.25)."""
    from optmodel import Interval, NonNegativeReals, Problem

    problem = Problem("production", solver="highs")
    x = problem.register("x", NonNegativeReals)
    y = problem.register("y", Interval(0, 3))
    problem.set_objective("min", 12 * x + 20 * y)
    problem.add_constraint("c1", 6 * x + 8 * y >= 100)
    problem.add_constraint("c2", 7 * x + 12 * y >= 120)
    return problem
