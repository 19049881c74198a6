from __future__ import annotations

import logging
import os

from rich.logging import RichHandler


_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def setup_logging(level: str | None = None) -> None:
    """Configure concise, readable console logging.

    Uses standard `logging` + RichHandler. Safe to call multiple times.
    The library itself never calls this; applications do.

    Level resolution (first match wins):
      1) argument `level`
      2) env var `REMSENS_LOG_LEVEL`
      3) `log_level` from :func:`remsens.config.get_settings`
    """

    if level is None:
        level = os.environ.get("REMSENS_LOG_LEVEL")
    if level is None:
        from remsens.config import get_settings

        level = get_settings().log_level

    level = str(level).upper().strip()
    if level not in _LEVELS:
        level = "INFO"

    # Avoid duplicated handlers on re-init.
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%H:%M:%S]",
        handlers=[
            RichHandler(
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                show_path=False,
                show_time=True,
                omit_repeated_times=False,
            )
        ],
    )
