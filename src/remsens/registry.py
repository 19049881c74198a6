"""Process-wide formula registry.

Formula modules register one :class:`~remsens.contracts.FormulaSpec` per
exposed function at import time. Importing :mod:`remsens.formulas` imports
every module and then freezes the registry; from then on it is a read-only
table that any number of threads may consult without coordination.

Names are namespaced by module (``em.photon_energy``,
``photographic.focal_len``, ...). The namespace carries no engine semantics.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from remsens.contracts import FormulaSpec
from remsens.errors import RegistryError


log = logging.getLogger(__name__)


class FormulaRegistry:
    def __init__(self) -> None:
        self._specs: dict[str, FormulaSpec] = {}
        self._frozen = False

    def register(self, spec: FormulaSpec) -> FormulaSpec:
        if self._frozen:
            raise RegistryError(f"Registry is frozen; cannot register '{spec.name}'")
        if spec.name in self._specs:
            raise RegistryError(f"Formula '{spec.name}' is already registered")
        self._specs[spec.name] = spec
        log.debug("registered formula %s", spec.name)
        return spec

    def freeze(self) -> None:
        if not self._frozen:
            self._frozen = True
            log.debug("formula registry frozen with %d formulas", len(self._specs))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> FormulaSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise RegistryError(f"Unknown formula: {name!r}") from None

    def specs(self, module: str | None = None) -> Mapping[str, FormulaSpec]:
        if module is None:
            return MappingProxyType(self._specs)
        return MappingProxyType({k: v for k, v in self._specs.items() if v.module == module})

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)


REGISTRY = FormulaRegistry()


def register(spec: FormulaSpec) -> FormulaSpec:
    return REGISTRY.register(spec)


def get_formula(name: str) -> FormulaSpec:
    return REGISTRY.get(name)


def list_formulas(module: str | None = None) -> Mapping[str, FormulaSpec]:
    return REGISTRY.specs(module)


def freeze() -> None:
    REGISTRY.freeze()


def is_frozen() -> bool:
    return REGISTRY.frozen
