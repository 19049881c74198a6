"""Evaluation reports and QC-style aggregation.

:func:`remsens.contracts.evaluate` returns an :class:`Evaluation` for every
call; it never raises the evaluation error itself. Callers either
:meth:`~Evaluation.unwrap` it (raising the stored :class:`EvalError`) or feed
many evaluations to :func:`summarize`.

Flag format
-----------
:meth:`Evaluation.as_flag` emits the canonical flag dict used across the
package:

- ``code``: stable machine-readable identifier
- ``severity``: one of ``INFO``, ``WARN``, ``ERROR``
- ``message``: short human-readable summary
- ``hint``: actionable suggestion (may be empty)

Caller errors (preconditions) and numeric breakdowns are ``WARN``; a
postcondition failure is a library defect and therefore ``ERROR``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from remsens.errors import EvalError, EvalState
from remsens.quantity import Quantity


# Public severities (ordered).
_SEV_ORDER: dict[str, int] = {
    "INFO": 1,
    "WARN": 2,
    "ERROR": 3,
}

_STATE_SEVERITY: dict[EvalState, str] = {
    EvalState.PENDING: "INFO",
    EvalState.VALIDATED: "INFO",
    EvalState.PRECONDITION_FAILED: "WARN",
    EvalState.NUMERIC_FAILED: "WARN",
    EvalState.POSTCONDITION_FAILED: "ERROR",
}

_STATE_HINT: dict[EvalState, str] = {
    EvalState.PENDING: "",
    EvalState.VALIDATED: "",
    EvalState.PRECONDITION_FAILED: "Fix the offending input; retrying with the same value fails again",
    EvalState.NUMERIC_FAILED: "Input is numerically unstable; retry with slightly adjusted values",
    EvalState.POSTCONDITION_FAILED: "Formula produced an invalid result for a valid input; report upstream",
}


def _plain(value: Any) -> Any:
    if isinstance(value, Quantity):
        return {"kind": value.kind, "magnitude": value.magnitude, "unit": value.unit}
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class Evaluation:
    """Outcome of one formula evaluation."""

    formula: str
    state: EvalState
    value: Any = None
    error: EvalError | None = None

    @property
    def ok(self) -> bool:
        return self.state == EvalState.VALIDATED

    @property
    def severity(self) -> str:
        return _STATE_SEVERITY[self.state]

    def unwrap(self) -> Any:
        """Return the validated value or raise the stored error."""
        if self.error is not None:
            raise self.error
        if self.state != EvalState.VALIDATED:
            raise RuntimeError(f"Evaluation of {self.formula} is not terminal: {self.state.value}")
        return self.value

    def as_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"formula": self.formula, "state": self.state.value}
        if self.ok:
            d["value"] = _plain(self.value)
        if self.error is not None:
            d["error"] = self.error.as_dict()
            violation = getattr(self.error, "violation", None)
            if violation is not None:
                d["error"]["contract"] = violation.contract
                d["error"]["phase"] = violation.phase.value
            failure = getattr(self.error, "failure", None)
            if failure is not None:
                d["error"]["reason"] = failure.reason
        return d

    def as_flag(self) -> dict[str, Any]:
        if self.error is not None:
            code = self.error.code
            message = self.error.message
        else:
            code = self.state.value
            message = ""
        return {
            "code": code,
            "severity": self.severity,
            "message": message,
            "hint": _STATE_HINT[self.state],
            "formula": self.formula,
        }


def max_severity(flags: Iterable[dict[str, Any]] | None) -> str:
    """Return the maximum severity among flags (INFO/WARN/ERROR)."""
    best = "INFO"
    for f in flags or []:
        s = str(f.get("severity") or "INFO").upper()
        if _SEV_ORDER.get(s, 0) > _SEV_ORDER.get(best, 0):
            best = s
    return best


@dataclass(frozen=True)
class EvaluationSummary:
    total: int
    counts: dict[str, int]
    max_severity: str
    flags: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.counts.get(EvalState.VALIDATED.value, 0) == self.total


def summarize(evaluations: Iterable[Evaluation]) -> EvaluationSummary:
    """Aggregate evaluations into counts per terminal state plus failure flags."""
    counts = {s.value: 0 for s in EvalState if s.terminal}
    flags: list[dict[str, Any]] = []
    total = 0
    for ev in evaluations:
        total += 1
        counts[ev.state.value] = counts.get(ev.state.value, 0) + 1
        if not ev.ok:
            flags.append(ev.as_flag())
    return EvaluationSummary(total=total, counts=counts, max_severity=max_severity(flags), flags=flags)
