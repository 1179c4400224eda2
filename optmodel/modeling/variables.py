"""Decision variables, indexed variable families, domains and parameters."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Hashable, Iterator, Optional

import torch

from ..errors import DomainError, UnregisteredSymbolError
from .expressions import DTYPE, Env, Expression, LinearForm, is_number

if TYPE_CHECKING:
    from .problem import Problem


def _check_bound(value: float, what: str) -> float:
    if not is_number(value):
        raise DomainError(f"{what} must be a real number, got {type(value).__name__}")
    value = float(value)
    if math.isnan(value):
        raise DomainError(f"{what} must not be NaN")
    return value


def _check_bounds(lower: float, upper: float) -> None:
    if lower == math.inf:
        raise DomainError("Lower bound cannot be +inf")
    if upper == -math.inf:
        raise DomainError("Upper bound cannot be -inf")
    if lower > upper:
        raise DomainError(f"Lower bound ({lower}) must be <= upper bound ({upper})")


@dataclass(frozen=True)
class Domain:
    """
    Set of admissible values of a variable.

    Attributes:
        lower: Lower bound (``-inf`` for none).
        upper: Upper bound (``+inf`` for none).
        integer: Whether the variable must take integral values.
    """

    lower: float = -math.inf
    upper: float = math.inf
    integer: bool = False

    def __post_init__(self) -> None:
        lower = _check_bound(self.lower, "Lower bound")
        upper = _check_bound(self.upper, "Upper bound")
        _check_bounds(lower, upper)
        object.__setattr__(self, "lower", lower)
        object.__setattr__(self, "upper", upper)

    def contains(self, value: float) -> bool:
        if not (self.lower <= value <= self.upper):
            return False
        return not self.integer or float(value).is_integer()


Reals = Domain()
NonNegativeReals = Domain(lower=0.0)
NonPositiveReals = Domain(upper=0.0)
Integers = Domain(integer=True)
NonNegativeIntegers = Domain(lower=0.0, integer=True)
Binary = Domain(lower=0.0, upper=1.0, integer=True)


def Interval(lower: float, upper: float) -> Domain:
    """Continuous domain ``[lower, upper]``."""
    return Domain(lower=lower, upper=upper)


class Variable(Expression):
    """
    Scalar decision variable owned by a :class:`~optmodel.Problem`.

    Variables are created with :meth:`Problem.register`. After creation only
    the bounds and the start value can change; every change discards the
    problem's last solution.
    """

    _is_variable = True

    def __init__(
        self,
        problem: "Problem",
        name: str,
        index: int,
        domain: Domain,
        start: Optional[float] = None,
    ) -> None:
        self._problem = problem
        self.name = name
        self.index = index
        self._lower = domain.lower
        self._upper = domain.upper
        self._integer = domain.integer
        self._saved_bounds: Optional[tuple[float, float]] = None
        self._start: Optional[float] = None
        if start is not None:
            self._start = self._validated_start(start)

    @property
    def problem(self) -> "Problem":
        return self._problem

    @property
    def lower(self) -> float:
        return self._lower

    @property
    def upper(self) -> float:
        return self._upper

    @property
    def is_integer(self) -> bool:
        return self._integer

    @property
    def is_fixed(self) -> bool:
        return self._lower == self._upper

    @property
    def start(self) -> Optional[float]:
        return self._start

    @property
    def domain(self) -> Domain:
        return Domain(self._lower, self._upper, self._integer)

    def _validated_start(self, value: float) -> float:
        value = _check_bound(value, f"Start value of {self.name!r}")
        if not (self._lower <= value <= self._upper):
            raise DomainError(
                f"Start value {value} of {self.name!r} lies outside "
                f"[{self._lower}, {self._upper}]"
            )
        return value

    def set_start(self, value: Optional[float]) -> None:
        """Set (or clear with None) the initial guess used by NLP solvers."""
        self._start = None if value is None else self._validated_start(value)
        self._problem._touch(f"start value of {self.name!r} changed")

    def set_lower_bound(self, value: float) -> None:
        self.set_bounds(value, self._upper)

    def set_upper_bound(self, value: float) -> None:
        self.set_bounds(self._lower, value)

    def set_bounds(self, lower: float, upper: float) -> None:
        """
        Replace both bounds.

        Raises:
            DomainError: If the bounds are NaN or ``lower > upper``.
        """
        lower = _check_bound(lower, "Lower bound")
        upper = _check_bound(upper, "Upper bound")
        _check_bounds(lower, upper)
        self._lower = lower
        self._upper = upper
        self._problem._touch(f"bounds of {self.name!r} changed")

    def fix(self, value: float) -> None:
        """Pin the variable to ``value``; :meth:`unfix` restores the old bounds."""
        value = _check_bound(value, f"Fixed value of {self.name!r}")
        if math.isinf(value):
            raise DomainError("A variable cannot be fixed to an infinite value")
        if self._saved_bounds is None:
            self._saved_bounds = (self._lower, self._upper)
        self._lower = value
        self._upper = value
        self._problem._touch(f"{self.name!r} fixed")

    def unfix(self) -> None:
        if self._saved_bounds is None:
            return
        self._lower, self._upper = self._saved_bounds
        self._saved_bounds = None
        self._problem._touch(f"{self.name!r} unfixed")

    # -- expression protocol ----------------------------------------------
    def _as_affine(self) -> LinearForm:
        return {self: 1.0}, 0.0

    def _linear(self) -> LinearForm:
        return {self: 1.0}, 0.0

    def _collect(self, seen: Dict[int, Expression]) -> None:
        seen.setdefault(id(self), self)

    def _eval(self, env: Env) -> torch.Tensor:
        return env(self)

    def __repr__(self) -> str:
        return self.name


class Parameter(Expression):
    """
    Named constant whose value may change between solves.

    The value is read when the problem is compiled for a solver, so
    re-solving after ``param.value = ...`` picks up the new value.
    """

    def __init__(self, problem: "Problem", name: str, value: float) -> None:
        self._problem = problem
        self.name = name
        self._value = _check_bound(value, f"Value of parameter {name!r}")

    @property
    def problem(self) -> "Problem":
        return self._problem

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, new_value: float) -> None:
        self._value = _check_bound(new_value, f"Value of parameter {self.name!r}")
        self._problem._touch(f"parameter {self.name!r} changed")

    def _linear(self) -> LinearForm:
        return {}, self._value

    def _collect(self, seen: Dict[int, Expression]) -> None:
        seen.setdefault(id(self), self)

    def _eval(self, env: Env) -> torch.Tensor:
        return torch.tensor(self._value, dtype=DTYPE)

    def __repr__(self) -> str:
        return self.name


def element_name(name: str, key: Hashable) -> str:
    """``x[3]`` or ``x[1,2]`` for tuple keys."""
    if isinstance(key, tuple):
        return f"{name}[{','.join(str(k) for k in key)}]"
    return f"{name}[{key}]"


class IndexedFamily(Mapping):
    """Read-only mapping from index to the symbols of a named family."""

    def __init__(self, problem: "Problem", name: str, elements: Dict[Hashable, Any]) -> None:
        self._problem = problem
        self.name = name
        self._elements = elements

    @property
    def problem(self) -> "Problem":
        return self._problem

    def __getitem__(self, key: Hashable) -> Any:
        try:
            return self._elements[key]
        except KeyError:
            raise UnregisteredSymbolError(f"{self.name!r} has no index {key!r}") from None

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, size={len(self)})"


class VariableArray(IndexedFamily):
    """Variables declared over an index set, e.g. a time grid."""

    def sum(self) -> Expression:
        from .functions import quicksum

        return quicksum(self._elements.values())


__all__ = [
    "Domain",
    "Reals",
    "NonNegativeReals",
    "NonPositiveReals",
    "Integers",
    "NonNegativeIntegers",
    "Binary",
    "Interval",
    "Variable",
    "Parameter",
    "IndexedFamily",
    "VariableArray",
    "element_name",
]
