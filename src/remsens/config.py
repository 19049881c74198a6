"""Settings loading (YAML file + environment overrides).

Resolution order for the settings file (first match wins):

1) explicit ``path`` argument
2) env var ``REMSENS_CONFIG``
3) no file: built-in defaults

Environment overrides applied on top of the file:

- ``REMSENS_LOG_LEVEL``       -> ``log_level``
- ``REMSENS_DEBUG_CONTRACTS`` -> ``debug_contracts`` (1/true/yes/on)

:func:`get_settings` loads once per process and caches the frozen result.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from remsens.schema import Settings, find_unknown_keys


log = logging.getLogger(__name__)

ENV_CONFIG = "REMSENS_CONFIG"
ENV_LOG_LEVEL = "REMSENS_LOG_LEVEL"
ENV_DEBUG_CONTRACTS = "REMSENS_DEBUG_CONTRACTS"

_TRUE = {"1", "true", "yes", "on"}


def load_config(cfg_path: str | Path) -> dict[str, Any]:
    """Load a YAML settings file as a plain dict (no validation)."""
    cfg_path = Path(cfg_path).expanduser().resolve()
    cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    if not isinstance(cfg, dict):
        raise TypeError(f"Settings file must contain a mapping: {cfg_path}")
    return cfg


def _env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    out = dict(raw)
    level = os.environ.get(ENV_LOG_LEVEL)
    if level:
        out["log_level"] = level
    dbg = os.environ.get(ENV_DEBUG_CONTRACTS)
    if dbg is not None and dbg.strip():
        out["debug_contracts"] = dbg.strip().lower() in _TRUE
    return out


def load_settings(path: str | Path | None = None) -> Settings:
    """Build validated :class:`Settings` from file and environment.

    Raises ``pydantic.ValidationError`` for out-of-range values.
    """
    if path is None:
        path = os.environ.get(ENV_CONFIG) or None

    raw: dict[str, Any] = {}
    if path is not None:
        raw = load_config(path)
        log.debug("loaded settings from %s", path)

    unknown = find_unknown_keys(raw)
    if unknown:
        log.warning("Unknown settings keys (ignored): %s", ", ".join(unknown))

    return Settings.model_validate(_env_overrides(raw))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process settings, loaded on first use. ``get_settings.cache_clear()`` reloads."""
    return load_settings()


def write_config(settings: Settings | dict[str, Any], out_path: str | Path) -> None:
    data = settings.model_dump() if isinstance(settings, Settings) else dict(settings)
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
