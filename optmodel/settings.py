"""Process-wide settings for optmodel.

Two settings exist: whether solvers print their own diagnostic output and
which solver is used when neither the call nor the problem names one. Both
can be seeded from the environment::

    OPTMODEL_VERBOSE=1      print solver logs
    OPTMODEL_SOLVER=highs   default solver name
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

_VERBOSE_ENV_VAR = "OPTMODEL_VERBOSE"
_SOLVER_ENV_VAR = "OPTMODEL_SOLVER"

_TRUTHY = ("1", "true", "yes", "on")

_verbose: bool = os.getenv(_VERBOSE_ENV_VAR, "0").lower() in _TRUTHY
_default_solver: Optional[str] = os.getenv(_SOLVER_ENV_VAR) or None


def is_verbose() -> bool:
    """
    Return whether solvers should print their diagnostic output.

    Returns
    -------
    bool
        True if solver output is enabled, False otherwise.
    """
    return _verbose


def set_verbose(enabled: bool) -> None:
    """
    Globally enable or disable solver output.

    Parameters
    ----------
    enabled:
        Whether solvers print their logs.
    """
    global _verbose
    _verbose = bool(enabled)


@contextmanager
def verbose_context(enabled: bool = True) -> Iterator[None]:
    """
    Context manager to temporarily enable or disable solver output.

    Example
    -------
    >>> with verbose_context(False):
    ...     pass
    """
    global _verbose
    prev = _verbose
    _verbose = bool(enabled)
    try:
        yield
    finally:
        _verbose = prev


def get_default_solver() -> Optional[str]:
    """Return the solver name used when none is configured, or None."""
    return _default_solver


def set_default_solver(name: Optional[str]) -> None:
    """
    Set the solver name used when neither the call nor the problem names one.

    Parameters
    ----------
    name:
        Registered solver name, or None to require explicit configuration.
    """
    global _default_solver
    _default_solver = name.lower() if name else None


@contextmanager
def solver_context(name: Optional[str]) -> Iterator[None]:
    """Context manager to temporarily change the default solver."""
    global _default_solver
    prev = _default_solver
    _default_solver = name.lower() if name else None
    try:
        yield
    finally:
        _default_solver = prev


__all__ = [
    "is_verbose",
    "set_verbose",
    "verbose_context",
    "get_default_solver",
    "set_default_solver",
    "solver_context",
]
