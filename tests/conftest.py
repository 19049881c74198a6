from __future__ import annotations

import pytest

from remsens.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    # Settings are cached per process; tests that patch the environment must
    # not leak into each other.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
