"""optmodel - declarative optimization modeling on top of SciPy solvers."""

__version__ = "0.1.0"

# Errors
from .errors import (
    DomainError,
    ExpressionError,
    ModelError,
    NameCollisionError,
    NoSolutionError,
    OptModelError,
    SolverUnavailableError,
    UnregisteredSymbolError,
    UnsupportedProblemError,
)

# Diagnostics
from .kkt import is_kkt_optimal, kkt_residuals

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Model construction
from .modeling import (
    Binary,
    Constraint,
    ConstraintArray,
    Domain,
    Expression,
    Integers,
    Interval,
    NonNegativeIntegers,
    NonNegativeReals,
    NonPositiveReals,
    Parameter,
    Problem,
    Reals,
    Relation,
    Sense,
    Variable,
    VariableArray,
    absolute,
    cos,
    exp,
    interval,
    log,
    quicksum,
    sin,
    sqrt,
    tan,
    tanh,
)

# Result queries
from .query import (
    dual,
    has_values,
    objective_value,
    reduced_cost,
    solve_time,
    termination_status,
    value,
)

# Risk measures
from .risk import cvar, expectation, mean_variance, variance, worst_case

# Settings
from .settings import (
    get_default_solver,
    is_verbose,
    set_default_solver,
    set_verbose,
    solver_context,
    verbose_context,
)

# Solvers
from .solvers import (
    HighsSolver,
    NlpSolver,
    SolveResult,
    SolverAdapter,
    SolverOptions,
    TerminationStatus,
    available_solvers,
    get_solver,
    register_solver,
    solve,
)

# Summaries
from .summary import print_problem_summary, problem_summary

__all__ = [
    "__version__",
    # Model construction
    "Problem",
    "Sense",
    "Variable",
    "VariableArray",
    "Parameter",
    "Constraint",
    "ConstraintArray",
    "Expression",
    "Relation",
    "Domain",
    "Reals",
    "NonNegativeReals",
    "NonPositiveReals",
    "Integers",
    "NonNegativeIntegers",
    "Binary",
    "Interval",
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
    # Solvers
    "TerminationStatus",
    "SolverOptions",
    "SolveResult",
    "SolverAdapter",
    "HighsSolver",
    "NlpSolver",
    "register_solver",
    "get_solver",
    "available_solvers",
    "solve",
    # Result queries
    "value",
    "dual",
    "reduced_cost",
    "objective_value",
    "termination_status",
    "has_values",
    "solve_time",
    # Risk measures
    "expectation",
    "variance",
    "mean_variance",
    "cvar",
    "worst_case",
    # Diagnostics
    "kkt_residuals",
    "is_kkt_optimal",
    "problem_summary",
    "print_problem_summary",
    # Errors
    "OptModelError",
    "ModelError",
    "NameCollisionError",
    "DomainError",
    "ExpressionError",
    "UnregisteredSymbolError",
    "UnsupportedProblemError",
    "SolverUnavailableError",
    "NoSolutionError",
    # Settings and logging
    "is_verbose",
    "set_verbose",
    "verbose_context",
    "get_default_solver",
    "set_default_solver",
    "solver_context",
    "get_logger",
    "set_log_level",
    "configure_logging",
]
