"""
Model construction: variables, parameters, expressions, constraints, problems.
"""

from .constraints import Constraint, ConstraintArray
from .expressions import (
    AffineExpression,
    BinaryExpression,
    Expression,
    FunctionExpression,
    PowerExpression,
    Relation,
    as_expression,
)
from .functions import absolute, cos, exp, interval, log, quicksum, sin, sqrt, tan, tanh
from .problem import Problem, Sense
from .variables import (
    Binary,
    Domain,
    Integers,
    Interval,
    NonNegativeIntegers,
    NonNegativeReals,
    NonPositiveReals,
    Parameter,
    Reals,
    Variable,
    VariableArray,
)

__all__ = [
    # Builder
    "Problem",
    "Sense",
    # Symbols
    "Variable",
    "VariableArray",
    "Parameter",
    "Constraint",
    "ConstraintArray",
    # Domains
    "Domain",
    "Reals",
    "NonNegativeReals",
    "NonPositiveReals",
    "Integers",
    "NonNegativeIntegers",
    "Binary",
    "Interval",
    # Expressions
    "Expression",
    "AffineExpression",
    "BinaryExpression",
    "PowerExpression",
    "FunctionExpression",
    "Relation",
    "as_expression",
    # Functions
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
