"""remsens: remote sensing formulas with enforced physical contracts.

Every formula takes typed quantities (or raw floats, coerced and checked),
runs its declared preconditions, computes, and checks its postconditions.
Importing the package registers all formulas and freezes the registry.
"""

from .version import __version__
from .errors import (
    ContractViolation,
    DomainError,
    EvalError,
    EvalState,
    NumericError,
    NumericFailure,
    PostconditionError,
    PreconditionError,
    RegistryError,
)
from .quantity import Quantity, construct, kind_by_name, list_kinds
from .contracts import FormulaSpec, Param, evaluate
from .report import Evaluation, EvaluationSummary, summarize
from .registry import get_formula, is_frozen, list_formulas
from . import formulas

__all__ = [
    "__version__",
    "ContractViolation",
    "DomainError",
    "EvalError",
    "EvalState",
    "Evaluation",
    "EvaluationSummary",
    "FormulaSpec",
    "NumericError",
    "NumericFailure",
    "Param",
    "PostconditionError",
    "PreconditionError",
    "Quantity",
    "RegistryError",
    "construct",
    "evaluate",
    "formulas",
    "get_formula",
    "is_frozen",
    "kind_by_name",
    "list_formulas",
    "list_kinds",
    "summarize",
]
