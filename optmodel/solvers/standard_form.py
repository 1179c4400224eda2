"""
Matrix form of a linear problem.

Linear solvers do not see expressions; they see

```
    minimize/maximize   c^T x + offset
    subject to          row_lower <= A x <= row_upper
                        lb <= x <= ub
                        x_j integral where integrality[j] == 1
```

Rows follow the order in which constraints were registered, columns the
order of variables, so results map back onto the problem's symbols by
index. Parameters are replaced by their current values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List

import numpy as np

from ..errors import UnsupportedProblemError

if TYPE_CHECKING:
    from ..modeling.constraints import Constraint
    from ..modeling.problem import Problem, Sense
    from ..modeling.variables import Variable


@dataclass
class LinearForm:
    """Dense matrix description of a linear (or mixed-integer linear) problem."""

    c: np.ndarray
    offset: float
    matrix: np.ndarray
    row_lower: np.ndarray
    row_upper: np.ndarray
    lb: np.ndarray
    ub: np.ndarray
    integrality: np.ndarray
    sense: "Sense"
    variables: List["Variable"]
    constraints: List["Constraint"]

    @property
    def num_variables(self) -> int:
        return self.c.shape[0]

    @property
    def num_rows(self) -> int:
        return self.matrix.shape[0]

    def objective(self, x: np.ndarray) -> float:
        return float(self.c @ x + self.offset)

    def activity(self, x: np.ndarray) -> np.ndarray:
        """Row values ``A x``."""
        return self.matrix @ x


def compile_linear(problem: "Problem") -> LinearForm:
    """
    Translate ``problem`` into a :class:`LinearForm`.

    Raises:
        UnsupportedProblemError: If the objective or a constraint is
            nonlinear.
    """
    variables = problem.variables
    constraints = problem.constraints
    n = len(variables)
    m = len(constraints)

    objective = problem.objective.linear_form()
    if objective is None:
        raise UnsupportedProblemError(
            f"The objective of problem {problem.name!r} is nonlinear; use an NLP solver"
        )
    c = np.zeros(n)
    for var, coef in objective[0].items():
        c[var.index] += coef

    matrix = np.zeros((m, n))
    row_lower = np.empty(m)
    row_upper = np.empty(m)
    for i, con in enumerate(constraints):
        form = con.function.linear_form()
        if form is None:
            raise UnsupportedProblemError(
                f"Constraint {con.name!r} is nonlinear; use an NLP solver"
            )
        terms, constant = form
        for var, coef in terms.items():
            matrix[i, var.index] += coef
        row_lower[i] = con.lower - constant
        row_upper[i] = con.upper - constant

    lb = np.array([var.lower for var in variables], dtype=float)
    ub = np.array([var.upper for var in variables], dtype=float)
    integrality = np.array([1 if var.is_integer else 0 for var in variables], dtype=int)

    return LinearForm(
        c=c,
        offset=objective[1],
        matrix=matrix,
        row_lower=row_lower,
        row_upper=row_upper,
        lb=lb,
        ub=ub,
        integrality=integrality,
        sense=problem.sense,
        variables=variables,
        constraints=constraints,
    )


__all__ = ["LinearForm", "compile_linear"]
