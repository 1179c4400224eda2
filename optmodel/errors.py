"""Exception hierarchy for optmodel.

Construction mistakes raise immediately. Solver outcomes such as
infeasibility are reported through :class:`~optmodel.solvers.TerminationStatus`
and only turn into :class:`NoSolutionError` when results are queried.
"""

from __future__ import annotations


class OptModelError(Exception):
    """Base class for all optmodel errors."""


class ModelError(OptModelError):
    """Invalid model construction."""


class NameCollisionError(ModelError, ValueError):
    """A name is already taken by another entity of the same problem."""


class DomainError(ModelError, ValueError):
    """Inconsistent bounds, start values or probabilities."""


class ExpressionError(ModelError, TypeError):
    """Malformed expression or relation."""


class UnregisteredSymbolError(ModelError, KeyError):
    """A symbol does not belong to the problem it is used with."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class UnsupportedProblemError(OptModelError, ValueError):
    """The selected solver cannot handle this kind of problem."""


class SolverUnavailableError(OptModelError, RuntimeError):
    """No usable solver adapter is configured."""


class NoSolutionError(OptModelError, RuntimeError):
    """Results were queried but no solution is available."""


__all__ = [
    "OptModelError",
    "ModelError",
    "NameCollisionError",
    "DomainError",
    "ExpressionError",
    "UnregisteredSymbolError",
    "UnsupportedProblemError",
    "SolverUnavailableError",
    "NoSolutionError",
]
