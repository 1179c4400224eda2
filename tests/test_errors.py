"""Tests for the exception hierarchy."""

import pytest

from optmodel import (
    DomainError,
    ExpressionError,
    ModelError,
    NameCollisionError,
    NoSolutionError,
    OptModelError,
    Problem,
    SolverUnavailableError,
    UnregisteredSymbolError,
    UnsupportedProblemError,
)


@pytest.mark.parametrize(
    "error, builtin",
    [
        (NameCollisionError, ValueError),
        (DomainError, ValueError),
        (ExpressionError, TypeError),
        (UnregisteredSymbolError, KeyError),
        (UnsupportedProblemError, ValueError),
        (SolverUnavailableError, RuntimeError),
        (NoSolutionError, RuntimeError),
    ],
)
def test_errors_subclass_builtins(error, builtin):
    assert issubclass(error, OptModelError)
    assert issubclass(error, builtin)


def test_construction_errors_are_model_errors():
    for error in (NameCollisionError, DomainError, ExpressionError, UnregisteredSymbolError):
        assert issubclass(error, ModelError)
    assert not issubclass(NoSolutionError, ModelError)


def test_unregistered_symbol_message_is_not_quoted():
    problem = Problem("p")
    with pytest.raises(UnregisteredSymbolError) as excinfo:
        problem["missing"]
    assert str(excinfo.value) == "No entity named 'missing' in problem 'p'"
