"""Pydantic schema for the remsens settings file (``remsens.yaml``).

Notes
-----
- Extra keys are allowed (forward compatibility) but reported by
  :func:`find_unknown_keys` so typos do not go unnoticed.
- :func:`schema_validate` returns a small report object (ok/errors/warnings)
  instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


# ---------------------------- report objects ----------------------------


@dataclass(frozen=True)
class SchemaIssue:
    code: str
    message: str
    hint: str = ""


@dataclass(frozen=True)
class SchemaReport:
    ok: bool
    errors: List[SchemaIssue]
    warnings: List[SchemaIssue]


# ------------------------------ pydantic ------------------------------


class Settings(BaseModel):
    """Process-wide settings.

    debug_contracts: also check debug-only contracts (closed-form equality
        checks on results). Off by default, as they double the arithmetic.
    integration_step: default angular step [rad] for hemispherical numerical
        integration (irradiance, beam solid angle, antenna temperature).
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    log_level: str = "INFO"
    debug_contracts: bool = False
    integration_step: float = Field(default=0.01, gt=0.0, le=0.5)

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        level = str(v).upper().strip()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


def find_unknown_keys(raw: Dict[str, Any]) -> List[str]:
    known = set(Settings.model_fields)
    return sorted(str(k) for k in (raw or {}) if k not in known)


def schema_validate(raw: Dict[str, Any]) -> SchemaReport:
    errors: List[SchemaIssue] = []
    warnings: List[SchemaIssue] = []

    if not isinstance(raw, dict):
        errors.append(SchemaIssue("NOT_A_MAPPING", "settings must be a mapping", "Fix YAML"))
        return SchemaReport(ok=False, errors=errors, warnings=warnings)

    try:
        Settings.model_validate(raw)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(x) for x in err.get("loc", ()))
            errors.append(SchemaIssue("SCHEMA", f"{loc}: {err.get('msg')}", "Fix the value type/range"))

    for k in find_unknown_keys(raw):
        warnings.append(SchemaIssue("UNKNOWN_KEY", f"Unknown settings key: {k}", "Check for typos"))

    return SchemaReport(ok=not errors, errors=errors, warnings=warnings)
