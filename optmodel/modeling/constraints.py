"""Named constraints and constraint families."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional

from ..errors import DomainError
from .expressions import Expression
from .variables import IndexedFamily, _check_bound

if TYPE_CHECKING:
    from .problem import Problem


class Constraint:
    """
    ``lower <= function <= upper`` registered with a problem.

    Numeric constants are moved out of ``function`` into the bounds when the
    constraint is created, so for ``6x + 8y >= 100`` the function is
    ``6x + 8y`` and the bounds are ``[100, inf)``.
    """

    def __init__(
        self,
        problem: "Problem",
        name: str,
        index: int,
        function: Expression,
        lower: float,
        upper: float,
        kind: str,
    ) -> None:
        self._problem = problem
        self.name = name
        self.index = index
        self.function = function
        self._lower = lower
        self._upper = upper
        self.kind = kind

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
    def is_linear(self) -> bool:
        return self.function.is_linear

    @property
    def is_equality(self) -> bool:
        return self._lower == self._upper

    def set_bounds(self, lower: Optional[float] = None, upper: Optional[float] = None) -> None:
        """
        Change the right-hand side(s); None keeps the current value.

        Raises:
            DomainError: If the new bounds are NaN or ``lower > upper``.
        """
        new_lower = self._lower if lower is None else _check_bound(lower, "Lower bound")
        new_upper = self._upper if upper is None else _check_bound(upper, "Upper bound")
        if new_lower > new_upper or new_lower == math.inf or new_upper == -math.inf:
            raise DomainError(
                f"Invalid bounds [{new_lower}, {new_upper}] for constraint {self.name!r}"
            )
        self._lower = new_lower
        self._upper = new_upper
        self._problem._touch(f"bounds of constraint {self.name!r} changed")

    def __repr__(self) -> str:
        if self.is_equality:
            return f"{self.name}: {self.function!r} == {self._lower:g}"
        if math.isinf(self._lower):
            return f"{self.name}: {self.function!r} <= {self._upper:g}"
        if math.isinf(self._upper):
            return f"{self.name}: {self.function!r} >= {self._lower:g}"
        return f"{self.name}: {self._lower:g} <= {self.function!r} <= {self._upper:g}"


class ConstraintArray(IndexedFamily):
    """Constraints declared together with :meth:`Problem.add_constraints`."""


__all__ = ["Constraint", "ConstraintArray"]
