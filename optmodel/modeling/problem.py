"""
The :class:`Problem` builder.

A problem owns a single namespace shared by variables, parameters and
constraints, an objective and the result of its last solve. Every entity is
created through the problem and keeps a reference to it, so results can be
looked up from the entity alone and entities of another problem are rejected.

Example:
    >>> from optmodel import Problem, NonNegativeReals, Interval, value
    >>> p = Problem("production", solver="highs")
    >>> x = p.register("x", NonNegativeReals)
    >>> y = p.register("y", Interval(0, 3))
    >>> p.set_objective("min", 12 * x + 20 * y)
    >>> c1 = p.add_constraint("c1", 6 * x + 8 * y >= 100)
    >>> c2 = p.add_constraint("c2", 7 * x + 12 * y >= 120)
    >>> p.optimize().status.value
    'optimal'
    >>> round(value(x), 6), round(value(y), 6)
    (15.0, 1.25)
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Hashable, Iterable, List, Mapping, Optional, Union

from ..errors import (
    DomainError,
    ExpressionError,
    ModelError,
    NameCollisionError,
    UnregisteredSymbolError,
)
from ..logging import get_logger
from .constraints import Constraint, ConstraintArray
from .expressions import AffineExpression, Expression, Relation, as_expression
from .variables import (
    Domain,
    Parameter,
    Reals,
    Variable,
    VariableArray,
    element_name,
)

if TYPE_CHECKING:
    from ..solvers.core import SolveResult, SolverAdapter, SolverOptions

logger = get_logger(__name__)


class Sense(Enum):
    """Optimization direction."""

    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"

    @classmethod
    def parse(cls, sense: Union["Sense", str]) -> "Sense":
        if isinstance(sense, Sense):
            return sense
        if isinstance(sense, str):
            key = sense.strip().lower()
            if key in ("min", "minimize", "minimise"):
                return cls.MINIMIZE
            if key in ("max", "maximize", "maximise"):
                return cls.MAXIMIZE
        raise ModelError(f"Unknown objective sense {sense!r}; use 'min' or 'max'")


class Problem:
    """
    Mutable description of an optimization model.

    Args:
        name: Label used in logs and error messages.
        solver: Registered solver name (e.g. ``"highs"``) or a
            :class:`~optmodel.solvers.SolverAdapter` instance used by
            :meth:`optimize` when no solver is passed explicitly.
        options: Default :class:`~optmodel.solvers.SolverOptions`.
    """

    def __init__(
        self,
        name: str = "problem",
        solver: Union[str, "SolverAdapter", None] = None,
        options: Optional["SolverOptions"] = None,
    ) -> None:
        self.name = name
        self._entities: Dict[str, Any] = {}
        # element name -> element, for members of variable and constraint families
        self._elements: Dict[str, Any] = {}
        self._variables: List[Variable] = []
        self._constraints: List[Constraint] = []
        self._parameters: List[Parameter] = []
        self._sense = Sense.MINIMIZE
        self._objective: Expression = AffineExpression()
        self._has_objective = False
        self._result: Optional["SolveResult"] = None
        self._solver = solver
        self._options = options

    # -- bookkeeping ------------------------------------------------------
    def _claim(self, name: str) -> None:
        if not isinstance(name, str) or not name:
            raise ModelError("Names must be non-empty strings")
        existing = self._entities.get(name, self._elements.get(name))
        if existing is not None:
            raise NameCollisionError(
                f"Name {name!r} is already used by a {type(existing).__name__} "
                f"in problem {self.name!r}"
            )

    def _claim_elements(self, family: str, names: Iterable[str]) -> None:
        """Check the element names of a new family ``family`` against every claimed name."""
        seen = set()
        for full_name in names:
            if full_name in seen:
                raise NameCollisionError(f"Family {family!r} produces the element name {full_name!r} twice")
            self._claim(full_name)
            seen.add(full_name)

    def _check_owned(self, expr: Expression) -> None:
        for symbol in expr.symbols():
            if getattr(symbol, "problem", None) is not self:
                raise UnregisteredSymbolError(
                    f"{type(symbol).__name__} {getattr(symbol, 'name', symbol)!r} "
                    f"is not registered with problem {self.name!r}"
                )

    def _touch(self, reason: str) -> None:
        if self._result is not None:
            logger.debug("%s: discarding previous solution (%s)", self.name, reason)
            self._result = None

    def _store_result(self, result: "SolveResult") -> None:
        self._result = result

    def owns(self, symbol: Any) -> bool:
        """Return True if ``symbol`` was registered with this problem."""
        if isinstance(symbol, Variable):
            return (
                symbol.problem is self
                and symbol.index < len(self._variables)
                and self._variables[symbol.index] is symbol
            )
        if isinstance(symbol, Constraint):
            return (
                symbol.problem is self
                and symbol.index < len(self._constraints)
                and self._constraints[symbol.index] is symbol
            )
        name = getattr(symbol, "name", None)
        return isinstance(name, str) and self._entities.get(name) is symbol

    def require(self, symbol: Any) -> None:
        """
        Raise unless ``symbol`` belongs to this problem.

        Raises:
            UnregisteredSymbolError: For symbols of another problem.
        """
        if isinstance(symbol, Expression) and not isinstance(symbol, (Variable, Parameter)):
            self._check_owned(symbol)
            return
        if not self.owns(symbol):
            raise UnregisteredSymbolError(
                f"{getattr(symbol, 'name', symbol)!r} is not registered with problem {self.name!r}"
            )

    # -- model builder ----------------------------------------------------
    def register(
        self,
        name: str,
        domain: Optional[Domain] = None,
        *,
        index: Optional[Iterable[Hashable]] = None,
        start: Union[float, Mapping[Hashable, float], None] = None,
    ) -> Union[Variable, VariableArray]:
        """
        Declare a variable, or a family of variables over ``index``.

        Args:
            name: Unique name within the problem.
            domain: Bounds and integrality; defaults to the real line.
            index: Optional index set (e.g. ``range(T)`` or a list of
                tuples). When given, a :class:`VariableArray` is returned.
            start: Initial guess; for families either a scalar applied to
                every element or a mapping from index to value.

        Raises:
            NameCollisionError: If ``name`` (or an element name) is taken.
            DomainError: If ``domain`` is not a Domain or a start value is
                outside the bounds.
        """
        self._claim(name)
        if domain is None:
            domain = Reals
        if not isinstance(domain, Domain):
            raise DomainError(f"Expected a Domain, got {type(domain).__name__}")

        if index is None:
            if isinstance(start, Mapping):
                raise DomainError("A scalar variable takes a scalar start value")
            var = Variable(self, name, len(self._variables), domain, start)
            self._variables.append(var)
            self._entities[name] = var
            logger.debug("%s: registered variable %s in [%s, %s]", self.name, name, domain.lower, domain.upper)
            self._touch(f"variable {name!r} added")
            return var

        keys = list(index)
        if len(set(keys)) != len(keys):
            raise NameCollisionError(f"Duplicate index in {name!r}")
        self._claim_elements(name, (element_name(name, key) for key in keys))
        elements: Dict[Hashable, Variable] = {}
        offset = len(self._variables)
        for key in keys:
            full_name = element_name(name, key)
            if isinstance(start, Mapping):
                element_start = start.get(key)
            else:
                element_start = start
            elements[key] = Variable(self, full_name, offset + len(elements), domain, element_start)

        array = VariableArray(self, name, elements)
        self._variables.extend(elements.values())
        self._entities[name] = array
        self._elements.update((var.name, var) for var in elements.values())
        logger.debug("%s: registered variable family %s with %d elements", self.name, name, len(elements))
        self._touch(f"variable family {name!r} added")
        return array

    def add_parameter(self, name: str, value: float) -> Parameter:
        """
        Declare a named constant that can be changed before re-solving.

        Raises:
            NameCollisionError: If ``name`` is taken.
            DomainError: If ``value`` is not a real number.
        """
        self._claim(name)
        param = Parameter(self, name, value)
        self._parameters.append(param)
        self._entities[name] = param
        logger.debug("%s: registered parameter %s = %s", self.name, name, param.value)
        self._touch(f"parameter {name!r} added")
        return param

    def set_objective(self, sense: Union[Sense, str], expression: Any) -> None:
        """
        Set the objective ``sense`` (min/max) and expression.

        Raises:
            ExpressionError: If ``expression`` is not an expression or number.
            UnregisteredSymbolError: If it uses another problem's symbols.
        """
        sense = Sense.parse(sense)
        if isinstance(expression, Relation):
            raise ExpressionError("The objective must be an expression, not a relation")
        expr = as_expression(expression)
        self._check_owned(expr)
        self._sense = sense
        self._objective = expr
        self._has_objective = True
        logger.debug("%s: objective set (%s)", self.name, sense.value)
        self._touch("objective changed")

    def _make_constraint(self, name: str, relation: Any, index: int) -> Constraint:
        if not isinstance(relation, Relation):
            raise ExpressionError(
                f"Constraint {name!r} expects a relation such as 'expr <= rhs', "
                f"got {type(relation).__name__}"
            )
        self._check_owned(relation.body)
        function, constant = relation.body._split_constant()
        return Constraint(
            self,
            name,
            index,
            function,
            relation.lower - constant,
            relation.upper - constant,
            relation.kind,
        )

    def add_constraint(self, name: str, relation: Relation) -> Constraint:
        """
        Register ``relation`` under ``name``.

        Raises:
            NameCollisionError: If ``name`` is taken.
            ExpressionError: If ``relation`` is not a :class:`Relation`.
            UnregisteredSymbolError: If it uses another problem's symbols.
        """
        self._claim(name)
        con = self._make_constraint(name, relation, len(self._constraints))
        self._constraints.append(con)
        self._entities[name] = con
        logger.debug("%s: added constraint %r", self.name, con)
        self._touch(f"constraint {name!r} added")
        return con

    def add_constraints(
        self,
        name: str,
        relations: Union[Mapping[Hashable, Relation], Iterable[Relation]],
    ) -> ConstraintArray:
        """
        Register a family of relations under ``name``.

        ``relations`` is either a mapping from index to relation or an
        iterable, in which case the indices are ``0..n-1``.
        """
        self._claim(name)
        items = list(relations.items() if isinstance(relations, Mapping) else enumerate(relations))
        self._claim_elements(name, (element_name(name, key) for key, _ in items))
        offset = len(self._constraints)
        elements: Dict[Hashable, Constraint] = {}
        for key, relation in items:
            full_name = element_name(name, key)
            elements[key] = self._make_constraint(full_name, relation, offset + len(elements))

        family = ConstraintArray(self, name, elements)
        self._constraints.extend(elements.values())
        self._entities[name] = family
        self._elements.update((con.name, con) for con in elements.values())
        logger.debug("%s: added constraint family %s with %d elements", self.name, name, len(elements))
        self._touch(f"constraint family {name!r} added")
        return family

    # -- solver configuration ----------------------------------------------
    def set_solver(
        self,
        solver: Union[str, "SolverAdapter", None],
        options: Optional["SolverOptions"] = None,
    ) -> None:
        self._solver = solver
        if options is not None:
            self._options = options

    @property
    def solver(self) -> Union[str, "SolverAdapter", None]:
        return self._solver

    @property
    def options(self) -> Optional["SolverOptions"]:
        return self._options

    def optimize(
        self,
        options: Optional["SolverOptions"] = None,
        solver: Union[str, "SolverAdapter", None] = None,
    ) -> "SolveResult":
        """Solve with the configured solver; see :func:`optmodel.solvers.solve`."""
        from ..solvers.registry import solve

        return solve(self, options=options, solver=solver)

    # -- introspection -----------------------------------------------------
    def __getitem__(self, name: str) -> Any:
        try:
            return self._entities[name]
        except KeyError:
            raise UnregisteredSymbolError(f"No entity named {name!r} in problem {self.name!r}") from None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._entities

    @property
    def variables(self) -> List[Variable]:
        return list(self._variables)

    @property
    def constraints(self) -> List[Constraint]:
        return list(self._constraints)

    @property
    def parameters(self) -> List[Parameter]:
        return list(self._parameters)

    @property
    def names(self) -> List[str]:
        return list(self._entities)

    @property
    def num_variables(self) -> int:
        return len(self._variables)

    @property
    def num_constraints(self) -> int:
        return len(self._constraints)

    @property
    def sense(self) -> Sense:
        return self._sense

    @property
    def objective(self) -> Expression:
        return self._objective

    @property
    def has_objective(self) -> bool:
        return self._has_objective

    @property
    def is_linear(self) -> bool:
        if not self._objective.is_linear:
            return False
        return all(con.is_linear for con in self._constraints)

    @property
    def is_mixed_integer(self) -> bool:
        return any(var.is_integer for var in self._variables)

    @property
    def result(self) -> Optional["SolveResult"]:
        """Result of the last solve, or None if unsolved or modified since."""
        return self._result

    def __repr__(self) -> str:
        return (
            f"Problem(name={self.name!r}, sense={self._sense.value}, "
            f"variables={self.num_variables}, constraints={self.num_constraints})"
        )


__all__ = ["Problem", "Sense"]
