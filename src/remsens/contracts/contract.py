"""Contract objects and the small vocabulary used to declare them.

A :class:`Contract` is a named predicate over named values. Preconditions see
the formula inputs (as magnitudes); postconditions additionally see
``result``. Predicates receive the values positionally, in ``args`` order:

>>> c = requires("velocity_below_c", ("velocity",), lambda v: v < 299_792_458.0, "velocity must be below c")
>>> c.check({"velocity": 10.0})
(True, None)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from remsens.errors import Phase


# Relative tolerance for debug-only "result equals closed form" checks.
REL_TOL = 1e-9

RESULT = "result"


@dataclass(frozen=True)
class Contract:
    name: str
    phase: Phase
    args: tuple[str, ...]
    predicate: Callable[..., Any]
    description: str
    debug_only: bool = False

    def check(self, values: Mapping[str, Any]) -> tuple[bool, str | None]:
        """Return ``(holds, detail)``.

        A predicate that raises is a failed contract; the exception text ends
        up in ``detail``.
        """
        try:
            ok = bool(self.predicate(*(values[a] for a in self.args)))
        except Exception as exc:  # noqa: BLE001 - reported as a violation
            return False, f"{type(exc).__name__}: {exc}"
        return ok, None


def _args(args: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(args, str):
        return (args,)
    return tuple(args)


def requires(
    name: str,
    args: str | Sequence[str],
    predicate: Callable[..., Any],
    description: str,
    *,
    debug_only: bool = False,
) -> Contract:
    return Contract(name, Phase.PRE, _args(args), predicate, description, debug_only)


def ensures(
    name: str,
    args: str | Sequence[str],
    predicate: Callable[..., Any],
    description: str,
    *,
    debug_only: bool = False,
) -> Contract:
    return Contract(name, Phase.POST, _args(args), predicate, description, debug_only)


# ------------------------------ preconditions ------------------------------


def positive(arg: str, description: str | None = None) -> Contract:
    return requires(f"{arg}_positive", arg, lambda x: x > 0.0, description or f"{arg} must be greater than zero")


def non_negative(arg: str, description: str | None = None) -> Contract:
    return requires(
        f"{arg}_non_negative", arg, lambda x: x >= 0.0, description or f"{arg} must be greater than or equal to zero"
    )


def in_range(arg: str, lower: float, upper: float, *, closed: bool = True, description: str | None = None) -> Contract:
    if closed:
        pred = lambda x: lower <= x <= upper  # noqa: E731
        desc = f"{arg} must lie in [{lower:g}, {upper:g}]"
    else:
        pred = lambda x: lower < x < upper  # noqa: E731
        desc = f"{arg} must lie in ({lower:g}, {upper:g})"
    return requires(f"{arg}_in_range", arg, pred, description or desc)


def same_length(*args: str) -> Contract:
    return requires(
        "same_length",
        args,
        lambda *seqs: len({len(s) for s in seqs}) == 1,
        f"{', '.join(args)} must have the same length",
    )


# ------------------------------ postconditions ------------------------------


def result_positive() -> Contract:
    return ensures("result_positive", RESULT, lambda r: r > 0.0, "result must be greater than zero")


def result_non_negative() -> Contract:
    return ensures("result_non_negative", RESULT, lambda r: r >= 0.0, "result must be greater than or equal to zero")


def result_in_range(lower: float, upper: float, *, description: str | None = None) -> Contract:
    return ensures(
        "result_in_range",
        RESULT,
        lambda r: lower <= r <= upper,
        description or f"result must lie in [{lower:g}, {upper:g}]",
    )


def result_close_to(
    args: str | Sequence[str],
    expected: Callable[..., float],
    description: str,
    *,
    rel_tol: float = REL_TOL,
) -> Contract:
    """Debug-only check that ``result`` matches a closed form of ``args``."""
    names = _args(args)
    return ensures(
        "result_matches_closed_form",
        (RESULT, *names),
        lambda r, *xs: math.isclose(r, expected(*xs), rel_tol=rel_tol),
        description,
        debug_only=True,
    )
