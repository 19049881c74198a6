from __future__ import annotations

import math

import numpy as np
import pytest

from remsens.contracts import (
    FormulaSpec,
    Param,
    ensures,
    evaluate,
    non_negative,
    positive,
    requires,
    result_close_to,
    result_in_range,
)
from remsens.errors import EvalState, NumericError, Phase, PostconditionError, PreconditionError
from remsens.quantity import Frequency, Reflectance, Temperature, Wavelength


def _recorder():
    calls: list[dict] = []

    def body(**kw):
        calls.append(kw)
        return 1.0 / kw["x"]

    return calls, body


def test_failed_precondition_short_circuits_body():
    calls, body = _recorder()
    spec = FormulaSpec(name="t.inv", params=(Param("x"),), body=body, preconditions=(positive("x"),))

    ev = evaluate(spec, {"x": 0.0})

    assert ev.state == EvalState.PRECONDITION_FAILED
    assert calls == []
    assert ev.error.violation.contract == "x_positive"
    assert ev.error.violation.phase == Phase.PRE
    assert ev.error.violation.values == {"x": 0.0}


def test_first_failing_precondition_is_reported():
    spec = FormulaSpec(
        name="t.two",
        params=(Param("a"), Param("b")),
        body=lambda a, b: a + b,
        preconditions=(positive("a"), positive("b")),
    )
    ev = evaluate(spec, {"a": -1.0, "b": -1.0})
    assert ev.error.violation.contract == "a_positive"


def test_kind_mismatch_is_precondition_failure():
    spec = FormulaSpec(name="t.kind", params=(Param("wavelength", Wavelength),), body=lambda wavelength: wavelength)
    ev = evaluate(spec, {"wavelength": Frequency(1.0)})
    assert ev.state == EvalState.PRECONDITION_FAILED
    assert ev.error.violation.contract == "wavelength.kind"
    assert "Frequency" in ev.error.message


def test_raw_float_outside_domain_is_precondition_failure():
    spec = FormulaSpec(name="t.dom", params=(Param("wavelength", Wavelength),), body=lambda wavelength: wavelength)
    ev = evaluate(spec, {"wavelength": -1.0})
    assert ev.error.violation.contract == "wavelength.domain"
    assert ev.error.code == "PRECONDITION"
    assert ev.error.retryable is False


def test_division_by_zero_inside_body_is_numeric_failure():
    spec = FormulaSpec(
        name="t.gap",
        params=(Param("wavelength", Wavelength), Param("reference", Wavelength)),
        body=lambda wavelength, reference: 1.0 / (wavelength - reference),
    )
    ev = evaluate(spec, {"wavelength": 500e-9, "reference": 500e-9})

    assert ev.state == EvalState.NUMERIC_FAILED
    assert isinstance(ev.error, NumericError)
    assert ev.error.failure.reason == "division_by_zero"
    assert ev.error.retryable is True


def test_numpy_overflow_is_trapped():
    spec = FormulaSpec(name="t.exp", params=(Param("x"),), body=lambda x: np.exp(np.float64(x)))
    ev = evaluate(spec, {"x": 1000.0})
    assert ev.state == EvalState.NUMERIC_FAILED
    assert ev.error.failure.reason == "overflow"


def test_non_finite_output_is_numeric_failure():
    spec = FormulaSpec(name="t.inf", params=(), body=lambda: float("inf"))
    ev = evaluate(spec, {})
    assert ev.state == EvalState.NUMERIC_FAILED
    assert ev.error.failure.reason == "non_finite_output"


@pytest.mark.parametrize(
    "body, x",
    [
        (math.log, 0.0),
        (math.sqrt, -1.0),
        (math.acos, 1.1),
    ],
)
def test_math_domain_error_is_numeric_failure(body, x):
    spec = FormulaSpec(name="t.math", params=(Param("x"),), body=lambda x: body(x))
    ev = evaluate(spec, {"x": x})
    assert ev.state == EvalState.NUMERIC_FAILED
    assert ev.error.failure.reason == "invalid"
    assert ev.error.failure.values == {"x": x}


def test_log_of_zero_after_passing_precondition():
    spec = FormulaSpec(
        name="t.log", params=(Param("x"),), body=lambda x: math.log(x), preconditions=(non_negative("x"),)
    )
    with pytest.raises(NumericError) as e:
        spec(0.0)
    assert e.value.failure.reason == "invalid"


def test_other_value_errors_are_not_numeric_failures():
    def body(x):
        raise ValueError("bad table row")

    spec = FormulaSpec(name="t.bug", params=(Param("x"),), body=body)
    with pytest.raises(ValueError, match="bad table row"):
        evaluate(spec, {"x": 1.0})


def test_result_outside_kind_domain_is_postcondition_failure():
    spec = FormulaSpec(name="t.refl", params=(), body=lambda: 1.2, result_kind=Reflectance)
    ev = evaluate(spec, {})
    assert ev.state == EvalState.POSTCONDITION_FAILED
    assert isinstance(ev.error, PostconditionError)
    assert ev.error.violation.contract == "result.domain"
    assert ev.error.violation.values == {"result": 1.2}
    assert ev.severity == "ERROR"


def test_declared_postcondition_runs_before_wrapping():
    spec = FormulaSpec(
        name="t.range",
        params=(),
        body=lambda: 1.2,
        postconditions=(result_in_range(0.0, 1.0),),
        result_kind=Reflectance,
    )
    ev = evaluate(spec, {})
    assert ev.error.violation.contract == "result_in_range"


def test_postcondition_sees_inputs_and_result():
    spec = FormulaSpec(
        name="t.double",
        params=(Param("x"),),
        body=lambda x: 2.0 * x,
        postconditions=(ensures("doubled", ("result", "x"), lambda r, x: r == 2.0 * x, "result must be 2x"),),
    )
    ev = evaluate(spec, {"x": 3.0})
    assert ev.ok
    assert ev.value == 6.0


def test_debug_only_contracts_run_only_in_debug_mode():
    spec = FormulaSpec(
        name="t.wrong",
        params=(Param("x"),),
        body=lambda x: x + 1e-3,
        postconditions=(result_close_to("x", lambda x: x, "result must equal x"),),
    )
    assert evaluate(spec, {"x": 1.0}).ok

    ev = evaluate(spec, {"x": 1.0}, debug=True)
    assert ev.state == EvalState.POSTCONDITION_FAILED
    assert ev.error.violation.contract == "result_matches_closed_form"


def test_raising_predicate_is_contract_failure():
    spec = FormulaSpec(
        name="t.len",
        params=(Param("xs"),),
        body=lambda xs: len(xs),
        preconditions=(requires("non_empty", "xs", lambda xs: len(xs) > 0, "xs must not be empty"),),
    )
    ev = evaluate(spec, {"xs": 5})
    assert ev.state == EvalState.PRECONDITION_FAILED
    assert "TypeError" in ev.error.violation.detail
    assert ev.error.violation.values == {"xs": 5.0}


def test_binding_errors_raise_type_error():
    spec = FormulaSpec(name="t.one", params=(Param("x"),), body=lambda x: x)
    with pytest.raises(TypeError):
        evaluate(spec, {"y": 1.0})
    with pytest.raises(TypeError):
        evaluate(spec, {})
    with pytest.raises(TypeError):
        spec.bind(1.0, 2.0)
    with pytest.raises(TypeError):
        spec.bind(1.0, x=2.0)


def test_defaults_are_bound_and_checked():
    spec = FormulaSpec(
        name="t.default",
        params=(Param("t", Temperature), Param("scale", default=2.0)),
        body=lambda t, scale: t * scale,
        preconditions=(positive("scale"),),
        result_kind=Temperature,
    )
    assert spec(150.0).magnitude == 300.0
    assert evaluate(spec, {"t": 150.0, "scale": -1.0}).error.violation.contract == "scale_positive"


def test_tuple_result_kinds():
    spec = FormulaSpec(
        name="t.pair",
        params=(),
        body=lambda: (np.float64(300.0), 0.5),
        result_kind=(Temperature, None),
    )
    ev = evaluate(spec, {})
    t, x = ev.value
    assert isinstance(t, Temperature)
    assert t.magnitude == 300.0
    assert x == 0.5 and type(x) is float


def test_evaluation_is_deterministic():
    spec = FormulaSpec(name="t.inv", params=(Param("x"),), body=lambda x: 1.0 / x, preconditions=(positive("x"),))
    for x in (2.0, 0.0):
        assert evaluate(spec, {"x": x}).as_dict() == evaluate(spec, {"x": x}).as_dict()


def test_call_unwraps_or_raises():
    spec = FormulaSpec(
        name="t.inv",
        params=(Param("x"),),
        body=lambda x: 1.0 / x,
        preconditions=(positive("x"),),
    )
    assert spec(4.0) == 0.25
    with pytest.raises(PreconditionError) as e:
        spec(0.0)
    assert e.value.code == "PRECONDITION"
    assert e.value.formula == "t.inv"


def test_spec_declaration_is_validated():
    with pytest.raises(ValueError):
        FormulaSpec(name="t.dup", params=(Param("x"), Param("x")), body=lambda x: x)
    with pytest.raises(ValueError):
        FormulaSpec(name="t.res", params=(Param("result"),), body=lambda result: result)
    with pytest.raises(ValueError):
        FormulaSpec(name="t.unknown", params=(Param("x"),), body=lambda x: x, preconditions=(positive("y"),))
    with pytest.raises(ValueError):
        FormulaSpec(
            name="t.phase",
            params=(Param("x"),),
            body=lambda x: x,
            preconditions=(result_in_range(0.0, 1.0),),
        )


def test_spec_module_from_name():
    spec = FormulaSpec(name="em.thing", params=(), body=lambda: 1.0)
    assert spec.module == "em"
