"""
Symbolic expressions over decision variables.

Arithmetic on numbers, variables and affine expressions stays on an affine
fast path (:class:`AffineExpression`, a ``{variable: coefficient}`` map plus a
constant). Anything else (products of variables, powers, elementary functions,
parameters) builds a small expression tree. Every node can

- report the variables it depends on (``variables()``),
- try to reduce itself to an affine form (``linear_form()``), substituting the
  current value of parameters, and
- evaluate itself on ``torch`` float64 scalars. The NLP adapter relies on this
  to obtain gradients and Hessians with ``torch.autograd``.

Comparisons build a :class:`Relation` ``lower <= body <= upper`` that a
problem turns into a named constraint.

Example:
    >>> from optmodel import Problem, NonNegativeReals
    >>> p = Problem()
    >>> x = p.register("x", NonNegativeReals)
    >>> y = p.register("y", NonNegativeReals)
    >>> expr = 12 * x + 20 * y
    >>> expr.linear_form()[1]
    0.0
"""

from __future__ import annotations

import math
import numbers
from typing import TYPE_CHECKING, Callable, Dict, List, Mapping, Optional, Tuple

import torch

from ..errors import DomainError, ExpressionError

if TYPE_CHECKING:
    from .variables import Variable

DTYPE = torch.float64

LinearTerms = Dict["Variable", float]
LinearForm = Tuple[LinearTerms, float]
Env = Callable[["Variable"], torch.Tensor]


def is_number(value: object) -> bool:
    """Return True for real scalars (Python or NumPy), excluding booleans."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def as_expression(value: object) -> "Expression":
    """
    Coerce ``value`` into an :class:`Expression`.

    Raises:
        ExpressionError: If ``value`` is neither a real scalar nor an
            expression (booleans are rejected since they usually come from an
            accidental comparison of plain numbers).
    """
    if isinstance(value, Expression):
        return value
    if is_number(value):
        constant = float(value)
        if math.isnan(constant):
            raise ExpressionError("NaN is not a valid constant in an expression")
        return AffineExpression({}, constant)
    raise ExpressionError(
        f"Unsupported operand of type {type(value).__name__!r} in expression"
    )


def _scale(form: LinearForm, factor: float) -> "AffineExpression":
    terms, constant = form
    return AffineExpression({var: coef * factor for var, coef in terms.items()}, constant * factor)


def _combine(left: "Expression", right: object, sign: float) -> "Expression":
    right = as_expression(right)
    left_aff = left._as_affine()
    right_aff = right._as_affine()
    if left_aff is not None and right_aff is not None:
        terms = dict(left_aff[0])
        for var, coef in right_aff[0].items():
            terms[var] = terms.get(var, 0.0) + sign * coef
        return AffineExpression(terms, left_aff[1] + sign * right_aff[1])
    return BinaryExpression("+" if sign > 0 else "-", left, right)


def _multiply(left: "Expression", right: object) -> "Expression":
    right = as_expression(right)
    left_aff = left._as_affine()
    right_aff = right._as_affine()
    if left_aff is not None and right_aff is not None:
        if not left_aff[0]:
            return _scale(right_aff, left_aff[1])
        if not right_aff[0]:
            return _scale(left_aff, right_aff[1])
    return BinaryExpression("*", left, right)


def _divide(left: "Expression", right: object) -> "Expression":
    right = as_expression(right)
    right_aff = right._as_affine()
    if right_aff is not None and not right_aff[0]:
        if right_aff[1] == 0.0:
            raise ExpressionError("Division by a constant zero")
        left_aff = left._as_affine()
        if left_aff is not None:
            return _scale(left_aff, 1.0 / right_aff[1])
    return BinaryExpression("/", left, right)


class Expression:
    """Base class for every symbolic quantity (variables and parameters included)."""

    _is_variable = False

    # -- tree protocol ----------------------------------------------------
    def _as_affine(self) -> Optional[LinearForm]:
        """Structural affine view used by the arithmetic fast path."""
        return None

    def _linear(self) -> Optional[LinearForm]:
        raise NotImplementedError

    def _collect(self, seen: Dict[int, "Variable"]) -> None:
        raise NotImplementedError

    def _eval(self, env: Env) -> torch.Tensor:
        raise NotImplementedError

    def _split_constant(self) -> Tuple["Expression", float]:
        return self, 0.0

    # -- public API -------------------------------------------------------
    def symbols(self) -> List["Expression"]:
        """Variables and parameters this expression refers to, in first-seen order."""
        seen: Dict[int, "Expression"] = {}
        self._collect(seen)
        return list(seen.values())

    def variables(self) -> List["Variable"]:
        """Variables this expression depends on, in first-seen order."""
        return [symbol for symbol in self.symbols() if symbol._is_variable]

    @property
    def is_constant(self) -> bool:
        return not self.variables()

    def linear_form(self) -> Optional[LinearForm]:
        """
        Return ``(terms, constant)`` if the expression is affine, else None.

        Parameters are replaced by their current value, so the result is only
        valid until a parameter changes.
        """
        form = self._linear()
        if form is None:
            return None
        terms, constant = form
        return {var: coef for var, coef in terms.items() if coef != 0.0}, float(constant)

    @property
    def is_linear(self) -> bool:
        return self.linear_form() is not None

    def evaluate(self, values: Mapping["Variable", float]) -> float:
        """
        Evaluate the expression for the given variable values.

        Raises:
            ExpressionError: If a variable of the expression has no value.
        """

        def env(var: "Variable") -> torch.Tensor:
            try:
                return torch.tensor(float(values[var]), dtype=DTYPE)
            except KeyError:
                raise ExpressionError(f"No value given for variable {var.name!r}") from None

        return float(self._eval(env))

    def to_tensor(self, env: Env) -> torch.Tensor:
        """Evaluate on tensors; ``env`` maps each variable to a scalar tensor."""
        return torch.as_tensor(self._eval(env), dtype=DTYPE)

    # -- arithmetic -------------------------------------------------------
    def __add__(self, other):
        return _combine(self, other, 1.0)

    def __radd__(self, other):
        return _combine(as_expression(other), self, 1.0)

    def __sub__(self, other):
        return _combine(self, other, -1.0)

    def __rsub__(self, other):
        return _combine(as_expression(other), self, -1.0)

    def __mul__(self, other):
        return _multiply(self, other)

    def __rmul__(self, other):
        return _multiply(as_expression(other), self)

    def __truediv__(self, other):
        return _divide(self, other)

    def __rtruediv__(self, other):
        return _divide(as_expression(other), self)

    def __pow__(self, exponent):
        return PowerExpression(self, as_expression(exponent))

    def __rpow__(self, base):
        return PowerExpression(as_expression(base), self)

    def __neg__(self):
        return _multiply(self, -1.0)

    def __pos__(self):
        return self

    # -- relations --------------------------------------------------------
    def __le__(self, other):
        return Relation.compare(self, other, "<=")

    def __ge__(self, other):
        return Relation.compare(self, other, ">=")

    def __eq__(self, other):
        if not isinstance(other, Expression) and not is_number(other):
            return NotImplemented
        return Relation.compare(self, other, "==")

    def __ne__(self, other):
        if not isinstance(other, Expression) and not is_number(other):
            return NotImplemented
        raise ExpressionError("'!=' cannot be used as a constraint")

    def __lt__(self, other):
        raise ExpressionError("Strict inequalities are not supported; use '<='")

    def __gt__(self, other):
        raise ExpressionError("Strict inequalities are not supported; use '>='")

    __hash__ = object.__hash__


def _format_coef(coef: float) -> str:
    return f"{coef:g}"


class AffineExpression(Expression):
    """``sum(coef * var) + constant``."""

    def __init__(self, terms: Optional[Mapping["Variable", float]] = None, constant: float = 0.0):
        self.terms: LinearTerms = {var: float(c) for var, c in (terms or {}).items() if c != 0.0}
        self.constant = float(constant)

    def _as_affine(self) -> LinearForm:
        return self.terms, self.constant

    def _linear(self) -> LinearForm:
        return dict(self.terms), self.constant

    def _collect(self, seen: Dict[int, "Variable"]) -> None:
        for var in self.terms:
            seen.setdefault(id(var), var)

    def _eval(self, env: Env) -> torch.Tensor:
        total = torch.tensor(self.constant, dtype=DTYPE)
        for var, coef in self.terms.items():
            total = total + coef * env(var)
        return total

    def _split_constant(self) -> Tuple[Expression, float]:
        return AffineExpression(self.terms, 0.0), self.constant

    def __repr__(self) -> str:
        pieces = []
        for var, coef in self.terms.items():
            if coef == 1.0:
                term = var.name
            elif coef == -1.0:
                term = f"-{var.name}"
            else:
                term = f"{_format_coef(coef)} {var.name}"
            pieces.append(term)
        if self.constant != 0.0 or not pieces:
            pieces.append(_format_coef(self.constant))
        text = pieces[0]
        for piece in pieces[1:]:
            text += f" - {piece[1:]}" if piece.startswith("-") else f" + {piece}"
        return text


class BinaryExpression(Expression):
    """Arithmetic node that left the affine fast path."""

    OPERATORS = ("+", "-", "*", "/")

    def __init__(self, op: str, left: Expression, right: Expression):
        if op not in self.OPERATORS:
            raise ExpressionError(f"Unknown operator {op!r}")
        self.op = op
        self.left = left
        self.right = right

    def _linear(self) -> Optional[LinearForm]:
        left = self.left._linear()
        if left is None:
            return None
        right = self.right._linear()
        if right is None:
            return None
        if self.op in ("+", "-"):
            sign = 1.0 if self.op == "+" else -1.0
            terms = dict(left[0])
            for var, coef in right[0].items():
                terms[var] = terms.get(var, 0.0) + sign * coef
            return terms, left[1] + sign * right[1]
        if self.op == "*":
            if not left[0]:
                return {v: c * left[1] for v, c in right[0].items()}, right[1] * left[1]
            if not right[0]:
                return {v: c * right[1] for v, c in left[0].items()}, left[1] * right[1]
            return None
        # division
        if right[0] or right[1] == 0.0:
            return None
        return {v: c / right[1] for v, c in left[0].items()}, left[1] / right[1]

    def _collect(self, seen: Dict[int, "Variable"]) -> None:
        self.left._collect(seen)
        self.right._collect(seen)

    def _eval(self, env: Env) -> torch.Tensor:
        left = self.left._eval(env)
        right = self.right._eval(env)
        if self.op == "+":
            return left + right
        if self.op == "-":
            return left - right
        if self.op == "*":
            return left * right
        return left / right

    def _split_constant(self) -> Tuple[Expression, float]:
        if self.op not in ("+", "-"):
            return self, 0.0
        left, left_const = self.left._split_constant()
        right, right_const = self.right._split_constant()
        sign = 1.0 if self.op == "+" else -1.0
        if right._as_affine() is not None and not right._as_affine()[0]:
            return left, left_const + sign * right_const
        if left._as_affine() is not None and not left._as_affine()[0]:
            return sign * right, left_const + sign * right_const
        return BinaryExpression(self.op, left, right), left_const + sign * right_const

    def __repr__(self) -> str:
        return f"({self.left!r} {self.op} {self.right!r})"


class PowerExpression(Expression):
    """``base ** exponent``."""

    def __init__(self, base: Expression, exponent: Expression):
        self.base = base
        self.exponent = exponent

    def _linear(self) -> Optional[LinearForm]:
        exponent = self.exponent._linear()
        if exponent is None or exponent[0]:
            return None
        power = exponent[1]
        if power == 0.0:
            return {}, 1.0
        base = self.base._linear()
        if base is None:
            return None
        if power == 1.0:
            return base
        if not base[0]:
            return {}, float(base[1] ** power)
        return None

    def _collect(self, seen: Dict[int, "Variable"]) -> None:
        self.base._collect(seen)
        self.exponent._collect(seen)

    def _eval(self, env: Env) -> torch.Tensor:
        return torch.pow(self.base._eval(env), self.exponent._eval(env))

    def __repr__(self) -> str:
        return f"({self.base!r})**({self.exponent!r})"


# name -> torch implementation
_FUNCTIONS: Dict[str, Callable[[torch.Tensor], torch.Tensor]] = {
    "exp": torch.exp,
    "log": torch.log,
    "sqrt": torch.sqrt,
    "sin": torch.sin,
    "cos": torch.cos,
    "tan": torch.tan,
    "tanh": torch.tanh,
    "abs": torch.abs,
}


class FunctionExpression(Expression):
    """Elementary function applied to a single argument."""

    def __init__(self, name: str, argument: Expression):
        if name not in _FUNCTIONS:
            raise ExpressionError(
                f"Unsupported function {name!r}. Supported functions: {sorted(_FUNCTIONS)}"
            )
        self.name = name
        self.argument = argument
        if not argument.symbols():
            self._linear()

    def _linear(self) -> Optional[LinearForm]:
        arg = self.argument._linear()
        if arg is None or arg[0]:
            return None
        result = float(_FUNCTIONS[self.name](torch.tensor(arg[1], dtype=DTYPE)))
        if not math.isfinite(result):
            raise DomainError(f"{self.name}({arg[1]!r}) is not a finite number")
        return {}, result

    def _collect(self, seen: Dict[int, "Variable"]) -> None:
        self.argument._collect(seen)

    def _eval(self, env: Env) -> torch.Tensor:
        return _FUNCTIONS[self.name](torch.as_tensor(self.argument._eval(env), dtype=DTYPE))

    def __repr__(self) -> str:
        return f"{self.name}({self.argument!r})"


class Relation:
    """
    ``lower <= body <= upper`` produced by comparing expressions.

    Relations are inert until a problem registers them with
    :meth:`~optmodel.Problem.add_constraint`.
    """

    KINDS = ("<=", ">=", "==", "interval")

    def __init__(self, body: Expression, lower: float, upper: float, kind: str):
        if kind not in self.KINDS:
            raise ExpressionError(f"Unknown relation kind {kind!r}")
        lower = float(lower)
        upper = float(upper)
        if math.isnan(lower) or math.isnan(upper):
            raise DomainError("Relation bounds must not be NaN")
        if lower > upper:
            raise DomainError(f"Lower bound ({lower}) must be <= upper bound ({upper})")
        self.body = body
        self.lower = lower
        self.upper = upper
        self.kind = kind

    @classmethod
    def compare(cls, lhs: object, rhs: object, op: str) -> "Relation":
        body = as_expression(lhs) - as_expression(rhs)
        if op == "<=":
            return cls(body, -math.inf, 0.0, op)
        if op == ">=":
            return cls(body, 0.0, math.inf, op)
        if op == "==":
            return cls(body, 0.0, 0.0, op)
        raise ExpressionError(f"Unknown comparison {op!r}")

    def __bool__(self) -> bool:
        raise ExpressionError(
            "A relation has no truth value. Chained comparisons such as "
            "'a <= x <= b' are not supported; use interval(a, x, b)."
        )

    def __repr__(self) -> str:
        if self.kind == "interval":
            return f"{self.lower:g} <= {self.body!r} <= {self.upper:g}"
        bound = self.upper if self.kind == "<=" else self.lower
        return f"{self.body!r} {self.kind} {bound:g}"


__all__ = [
    "DTYPE",
    "Expression",
    "AffineExpression",
    "BinaryExpression",
    "PowerExpression",
    "FunctionExpression",
    "Relation",
    "as_expression",
    "is_number",
]
