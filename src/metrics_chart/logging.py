from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVEL_ENV = "METRICS_CHART_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def resolve_log_level(level: str | None = None) -> str:
    """Explicit level, else ``METRICS_CHART_LOG_LEVEL``, else INFO."""
    chosen = (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(chosen), int):
        raise ValueError(f"Unknown log level: {chosen!r}")
    return chosen


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=resolve_log_level(level), format=LOG_FORMAT)
