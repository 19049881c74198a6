"""Error taxonomy shared by the quantity model and the contract engine.

Every failure a caller can see falls in exactly one bucket:

``DomainError``
    A Quantity was constructed with a magnitude outside its kind's domain
    (or NaN / infinite / not a number at all).
``PreconditionError``
    The caller supplied a physically invalid input to a formula. Not
    retryable without fixing the input.
``NumericError``
    The inputs were valid but the arithmetic broke down (NaN, infinity,
    overflow, division by zero). May succeed with slightly adjusted inputs,
    e.g. a perturbed near-singular angle.
``PostconditionError``
    The formula produced an output that violates its own promise for an
    otherwise valid input. This is a library defect and should be reported.

The three evaluation errors share :class:`EvalError`; all errors share
:class:`RemsensError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class RemsensError(Exception):
    """Base class for errors raised by remsens."""


class DomainError(RemsensError, ValueError):
    """Raised when a Quantity magnitude is outside its kind's domain."""

    code = "DOMAIN"

    def __init__(self, *, kind: str, magnitude: Any, domain: str, message: str | None = None) -> None:
        self.kind = str(kind)
        self.magnitude = magnitude
        self.domain = str(domain)
        self.message = message or f"{self.kind} magnitude {magnitude!r} is outside {self.domain}"
        super().__init__(f"{self.code}: {self.message}")


class RegistryError(RemsensError, RuntimeError):
    """Invalid use of the formula registry (duplicate name, late registration, unknown name)."""


class Phase(str, Enum):
    PRE = "PRE"
    POST = "POST"


class EvalState(str, Enum):
    """Lifecycle of a single evaluation. Everything except PENDING is terminal."""

    PENDING = "PENDING"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    NUMERIC_FAILED = "NUMERIC_FAILED"
    POSTCONDITION_FAILED = "POSTCONDITION_FAILED"
    VALIDATED = "VALIDATED"

    @property
    def terminal(self) -> bool:
        return self is not EvalState.PENDING


@dataclass(frozen=True)
class ContractViolation:
    """Record of the first contract that failed during one evaluation."""

    formula: str
    contract: str
    phase: Phase
    description: str
    values: dict[str, Any] = field(default_factory=dict)
    detail: str | None = None

    def summary(self) -> str:
        vals = ", ".join(f"{k}={v!r}" for k, v in self.values.items())
        s = f"{self.phase.value.lower()}condition '{self.contract}' failed: {self.description}"
        if vals:
            s += f" ({vals})"
        if self.detail:
            s += f" [{self.detail}]"
        return s


@dataclass(frozen=True)
class NumericFailure:
    """Floating point breakdown inside a computation whose preconditions held.

    ``reason`` is one of ``division_by_zero``, ``overflow``, ``invalid`` or
    ``non_finite_output``.
    """

    formula: str
    reason: str
    message: str
    values: dict[str, Any] = field(default_factory=dict)

    def summary(self) -> str:
        vals = ", ".join(f"{k}={v!r}" for k, v in self.values.items())
        s = f"numeric failure ({self.reason}): {self.message}"
        if vals:
            s += f" ({vals})"
        return s


class EvalError(RemsensError, RuntimeError):
    """Terminal failure of a formula evaluation."""

    state: ClassVar[EvalState]
    code: ClassVar[str]
    retryable: ClassVar[bool]

    def __init__(self, *, formula: str, message: str, values: dict[str, Any] | None = None) -> None:
        self.formula = str(formula)
        self.message = str(message)
        self.values = dict(values or {})
        super().__init__(f"[{self.formula}] {self.code}: {self.message}")

    def as_dict(self) -> dict[str, Any]:
        return {
            "formula": self.formula,
            "state": self.state.value,
            "code": self.code,
            "message": self.message,
            "values": dict(self.values),
            "retryable": self.retryable,
        }


class PreconditionError(EvalError):
    state = EvalState.PRECONDITION_FAILED
    code = "PRECONDITION"
    retryable = False

    def __init__(self, violation: ContractViolation) -> None:
        self.violation = violation
        super().__init__(formula=violation.formula, message=violation.summary(), values=violation.values)


class NumericError(EvalError):
    state = EvalState.NUMERIC_FAILED
    code = "NUMERIC"
    retryable = True

    def __init__(self, failure: NumericFailure) -> None:
        self.failure = failure
        super().__init__(formula=failure.formula, message=failure.summary(), values=failure.values)


class PostconditionError(EvalError):
    state = EvalState.POSTCONDITION_FAILED
    code = "POSTCONDITION"
    retryable = False

    def __init__(self, violation: ContractViolation) -> None:
        self.violation = violation
        super().__init__(formula=violation.formula, message=violation.summary(), values=violation.values)
