"""Contract layer ("law") for formula evaluation.

Formula modules should import from this package rather than the internal
implementation modules.
"""

from __future__ import annotations

from remsens.contracts.contract import (
    REL_TOL,
    Contract,
    ensures,
    in_range,
    non_negative,
    positive,
    requires,
    result_close_to,
    result_in_range,
    result_non_negative,
    result_positive,
    same_length,
)
from remsens.contracts.engine import evaluate
from remsens.contracts.formula import REQUIRED, FormulaSpec, Param

__all__ = [
    "REL_TOL",
    "REQUIRED",
    "Contract",
    "FormulaSpec",
    "Param",
    "ensures",
    "evaluate",
    "in_range",
    "non_negative",
    "positive",
    "requires",
    "result_close_to",
    "result_in_range",
    "result_non_negative",
    "result_positive",
    "same_length",
]
