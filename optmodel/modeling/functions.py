"""Elementary functions and helpers for building expressions."""

from __future__ import annotations

from typing import Iterable

from .expressions import (
    AffineExpression,
    Expression,
    FunctionExpression,
    Relation,
    as_expression,
)


def _apply(name: str, argument: object) -> Expression:
    return FunctionExpression(name, as_expression(argument))


def exp(x: object) -> Expression:
    return _apply("exp", x)


def log(x: object) -> Expression:
    return _apply("log", x)


def sqrt(x: object) -> Expression:
    return _apply("sqrt", x)


def sin(x: object) -> Expression:
    return _apply("sin", x)


def cos(x: object) -> Expression:
    return _apply("cos", x)


def tan(x: object) -> Expression:
    return _apply("tan", x)


def tanh(x: object) -> Expression:
    return _apply("tanh", x)


def absolute(x: object) -> Expression:
    """``|x|``; nonsmooth at zero, so prefer an epigraph formulation in LPs."""
    return _apply("abs", x)


def quicksum(items: Iterable[object]) -> Expression:
    """
    Sum expressions without building a deep chain of temporaries.

    Affine items are accumulated into a single coefficient map; nonlinear
    items are added afterwards.
    """
    terms: dict = {}
    constant = 0.0
    rest = []
    for item in items:
        expr = as_expression(item)
        affine = expr._as_affine()
        if affine is None:
            rest.append(expr)
            continue
        for var, coef in affine[0].items():
            terms[var] = terms.get(var, 0.0) + coef
        constant += affine[1]
    total: Expression = AffineExpression(terms, constant)
    for expr in rest:
        total = total + expr
    return total


def interval(lower: float, expression: object, upper: float) -> Relation:
    """
    Two-sided relation ``lower <= expression <= upper``.

    Python evaluates ``a <= x <= b`` as ``(a <= x) and (x <= b)``, which
    would drop one side, so ranges are written with this helper instead.

    Raises:
        DomainError: If ``lower > upper``.
    """
    return Relation(as_expression(expression), lower, upper, "interval")


__all__ = [
    "exp",
    "log",
    "sqrt",
    "sin",
    "cos",
    "tan",
    "tanh",
    "absolute",
    "quicksum",
    "interval",
]
