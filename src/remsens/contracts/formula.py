"""Formula declarations: :class:`Param` and :class:`FormulaSpec`.

A FormulaSpec is plain tagged data: ordered params, ordered preconditions, a
body, ordered postconditions, and the kind the result is wrapped into. It is
declared once at import time, registered in :mod:`remsens.registry`, and never
mutated afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from remsens.contracts.contract import RESULT, Contract
from remsens.contracts.engine import evaluate
from remsens.errors import Phase
from remsens.quantity import Quantity
from remsens.report import Evaluation


log = logging.getLogger(__name__)


class _Required:
    def __repr__(self) -> str:
        return "<required>"


REQUIRED: Any = _Required()


@dataclass(frozen=True)
class Param:
    """One declared formula input.

    ``kind=None`` marks a non-quantity input (callable, sequence, enum, int).
    """

    name: str
    kind: type[Quantity] | None = None
    default: Any = REQUIRED

    @property
    def has_default(self) -> bool:
        return self.default is not REQUIRED


@dataclass(frozen=True)
class FormulaSpec:
    """A named computation bound to its ordered contracts.

    ``result_kind`` is a Quantity class, a tuple of classes (``None`` entries
    leave that element unwrapped) for tuple results, or ``None``.
    """

    name: str
    params: tuple[Param, ...]
    body: Callable[..., Any]
    preconditions: tuple[Contract, ...] = ()
    postconditions: tuple[Contract, ...] = ()
    result_kind: Any = None
    description: str = ""

    def __post_init__(self) -> None:
        # Accept lists in declarations; store tuples.
        for attr in ("params", "preconditions", "postconditions"):
            object.__setattr__(self, attr, tuple(getattr(self, attr)))

        names = [p.name for p in self.params]
        if len(set(names)) != len(names):
            raise ValueError(f"{self.name}: duplicate parameter names {names}")
        if RESULT in names:
            raise ValueError(f"{self.name}: '{RESULT}' is reserved for postconditions")

        known = set(names)
        for c in self.preconditions:
            if c.phase != Phase.PRE:
                raise ValueError(f"{self.name}: '{c.name}' is not a precondition")
            missing = [a for a in c.args if a not in known]
            if missing:
                raise ValueError(f"{self.name}: precondition '{c.name}' refers to unknown {missing}")
        for c in self.postconditions:
            if c.phase != Phase.POST:
                raise ValueError(f"{self.name}: '{c.name}' is not a postcondition")
            missing = [a for a in c.args if a not in known and a != RESULT]
            if missing:
                raise ValueError(f"{self.name}: postcondition '{c.name}' refers to unknown {missing}")

    @property
    def module(self) -> str:
        return self.name.split(".", 1)[0] if "." in self.name else ""

    def bind(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        """Map positional/keyword arguments onto parameter names."""
        if len(args) > len(self.params):
            raise TypeError(f"{self.name}() takes {len(self.params)} arguments but {len(args)} were given")
        bound: dict[str, Any] = {}
        for p, v in zip(self.params, args):
            bound[p.name] = v
        for k, v in kwargs.items():
            if k in bound:
                raise TypeError(f"{self.name}() got multiple values for argument '{k}'")
            bound[k] = v
        return bound

    def evaluate(self, *args: Any, debug: bool = False, **kwargs: Any) -> Evaluation:
        return evaluate(self, self.bind(*args, **kwargs), debug=debug)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        """Evaluate and return the validated value, raising :class:`EvalError` on failure."""
        from remsens.config import get_settings

        ev = evaluate(self, self.bind(*args, **kwargs), debug=get_settings().debug_contracts)
        if not ev.ok:
            log.debug("%s -> %s: %s", self.name, ev.state.value, ev.error)
        return ev.unwrap()
