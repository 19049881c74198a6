from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from remsens.log import setup_logging


@pytest.fixture
def _restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    for h in list(root.handlers):
        if isinstance(h, RichHandler):
            root.removeHandler(h)
    root.setLevel(level)


def test_setup_logging_installs_single_rich_handler(_restore_root_logger, monkeypatch):
    monkeypatch.delenv("REMSENS_LOG_LEVEL", raising=False)
    setup_logging("DEBUG")
    setup_logging("DEBUG")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RichHandler)


def test_unknown_level_falls_back_to_info(_restore_root_logger):
    setup_logging("chatty")
    assert logging.getLogger().level == logging.INFO


def test_env_level_used_when_no_argument(_restore_root_logger, monkeypatch):
    monkeypatch.setenv("REMSENS_LOG_LEVEL", "warning")
    setup_logging()
    assert logging.getLogger().level == logging.WARNING


def test_settings_level_used_last(_restore_root_logger, monkeypatch, tmp_path):
    monkeypatch.delenv("REMSENS_LOG_LEVEL", raising=False)
    p = tmp_path / "remsens.yaml"
    p.write_text("log_level: ERROR\n", encoding="utf-8")
    monkeypatch.setenv("REMSENS_CONFIG", str(p))

    setup_logging()
    assert logging.getLogger().level == logging.ERROR
