"""Contract engine: run one formula under its declared contracts.

Evaluation order is fixed and deterministic:

1. bind and type-check the inputs (implicit ``<param>.kind`` /
   ``<param>.domain`` preconditions),
2. declared preconditions, in order,
3. the body, with floating point errors and math domain errors trapped,
4. declared postconditions, in order, then wrapping the output into the
   declared result kind (implicit ``result.domain`` postcondition).

The first failure ends the evaluation. The engine holds no state and does not
log; everything it knows ends up in the returned :class:`Evaluation`.
"""

from __future__ import annotations

import enum
import math
import numbers
from typing import TYPE_CHECKING, Any, Mapping

import numpy as np

from remsens.errors import (
    ContractViolation,
    DomainError,
    EvalError,
    EvalState,
    NumericError,
    NumericFailure,
    Phase,
    PostconditionError,
    PreconditionError,
)
from remsens.quantity import Quantity, magnitude_of
from remsens.report import Evaluation

if TYPE_CHECKING:
    from remsens.contracts.contract import Contract
    from remsens.contracts.formula import FormulaSpec, Param


def _reportable(value: Any) -> Any:
    """Compact representation of a value for violation reports."""
    if isinstance(value, (bool, str, enum.Enum)) or value is None:
        return value
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, tuple) and all(isinstance(v, numbers.Real) for v in value):
        return tuple(float(v) for v in value)
    return f"<{type(value).__name__}>"


def _failed(spec: "FormulaSpec", error: EvalError) -> Evaluation:
    return Evaluation(formula=spec.name, state=error.state, error=error)


def _violation(
    spec: "FormulaSpec",
    contract: str,
    phase: Phase,
    description: str,
    values: Mapping[str, Any],
    detail: str | None = None,
) -> ContractViolation:
    return ContractViolation(
        formula=spec.name,
        contract=contract,
        phase=phase,
        description=description,
        values={k: _reportable(v) for k, v in values.items()},
        detail=detail,
    )


def _bind_param(spec: "FormulaSpec", param: "Param", raw: Any) -> tuple[Any, ContractViolation | None]:
    kind = param.kind
    if kind is None or raw is None:
        return raw, None
    if isinstance(raw, kind):
        return raw.magnitude, None
    if isinstance(raw, Quantity):
        return raw, _violation(
            spec,
            f"{param.name}.kind",
            Phase.PRE,
            f"{param.name} must be a {kind.__name__}, got {raw.kind}",
            {param.name: raw.magnitude},
        )
    try:
        return kind(raw).magnitude, None
    except DomainError as exc:
        return raw, _violation(
            spec,
            f"{param.name}.domain",
            Phase.PRE,
            f"{param.name} must be a {kind.__name__} in {exc.domain}",
            {param.name: raw},
            detail=exc.message,
        )


def _run_contracts(
    spec: "FormulaSpec",
    contracts: tuple["Contract", ...],
    values: Mapping[str, Any],
    *,
    debug: bool,
) -> ContractViolation | None:
    for c in contracts:
        if c.debug_only and not debug:
            continue
        ok, detail = c.check(values)
        if not ok:
            return _violation(spec, c.name, c.phase, c.description, {a: values[a] for a in c.args}, detail)
    return None


# The math module reports NaN and -inf results as a plain ValueError. Python
# 3.14 replaced "math domain error" with "expected a ..." messages.
_MATH_DOMAIN_ERRORS = ("math domain error", "expected a ")


def _is_numeric_fault(exc: Exception) -> bool:
    if isinstance(exc, ArithmeticError):
        return True
    return type(exc) is ValueError and str(exc).startswith(_MATH_DOMAIN_ERRORS)


def _numeric_reason(exc: Exception) -> str:
    if isinstance(exc, ZeroDivisionError):
        return "division_by_zero"
    if isinstance(exc, OverflowError):
        return "overflow"
    text = str(exc).lower()
    if "divide by zero" in text:
        return "division_by_zero"
    if "overflow" in text:
        return "overflow"
    return "invalid"


def _first_non_finite(value: Any) -> float | None:
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (float, np.floating)):
        return None if math.isfinite(value) else float(value)
    if isinstance(value, np.ndarray) and value.dtype.kind in "fc":
        bad = value[~np.isfinite(value)]
        return float(np.real(bad.flat[0])) if bad.size else None
    if isinstance(value, (tuple, list)):
        for v in value:
            bad = _first_non_finite(v)
            if bad is not None:
                return bad
    return None


def _to_python(value: Any) -> Any:
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    if isinstance(value, tuple):
        return tuple(_to_python(v) for v in value)
    return value


def _wrap(result_kind: Any, value: Any) -> Any:
    if result_kind is None:
        return _to_python(value)
    if isinstance(result_kind, tuple):
        return tuple(_wrap(k, v) for k, v in zip(result_kind, value))
    return result_kind(value)


def evaluate(spec: "FormulaSpec", inputs: Mapping[str, Any], *, debug: bool = False) -> Evaluation:
    """Evaluate ``spec`` on ``inputs`` (parameter name -> value).

    Returns an :class:`~remsens.report.Evaluation` in one of the terminal
    states. Only malformed calls (unknown or missing parameter names) raise,
    with :class:`TypeError`, like any mis-called Python function.
    """
    names = {p.name for p in spec.params}
    unknown = sorted(set(inputs) - names)
    if unknown:
        raise TypeError(f"{spec.name}() got unexpected argument(s): {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for p in spec.params:
        if p.name in inputs:
            raw = inputs[p.name]
        elif p.has_default:
            raw = p.default
        else:
            raise TypeError(f"{spec.name}() missing required argument: '{p.name}'")
        bound, violation = _bind_param(spec, p, raw)
        if violation is not None:
            return _failed(spec, PreconditionError(violation))
        values[p.name] = bound

    violation = _run_contracts(spec, spec.preconditions, values, debug=debug)
    if violation is not None:
        return _failed(spec, PreconditionError(violation))

    try:
        with np.errstate(divide="raise", over="raise", invalid="raise", under="ignore"):
            output = spec.body(**values)
    except (ArithmeticError, ValueError) as exc:
        if not _is_numeric_fault(exc):
            raise
        failure = NumericFailure(
            formula=spec.name,
            reason=_numeric_reason(exc),
            message=str(exc) or type(exc).__name__,
            values={k: _reportable(v) for k, v in values.items()},
        )
        return _failed(spec, NumericError(failure))

    bad = _first_non_finite(output)
    if bad is not None:
        failure = NumericFailure(
            formula=spec.name,
            reason="non_finite_output",
            message=f"computation produced {bad!r}",
            values={k: _reportable(v) for k, v in values.items()},
        )
        return _failed(spec, NumericError(failure))

    post_values = dict(values)
    post_values["result"] = magnitude_of(output)
    violation = _run_contracts(spec, spec.postconditions, post_values, debug=debug)
    if violation is not None:
        return _failed(spec, PostconditionError(violation))

    try:
        wrapped = _wrap(spec.result_kind, output)
    except DomainError as exc:
        violation = _violation(
            spec,
            "result.domain",
            Phase.POST,
            f"result must be a {exc.kind} in {exc.domain}",
            {"result": post_values["result"]},
            detail=exc.message,
        )
        return _failed(spec, PostconditionError(violation))

    return Evaluation(formula=spec.name, state=EvalState.VALIDATED, value=wrapped)
