"""
Centralised logging helper for httpmetrics.

This module configures a single root logger that can emit either human-readable
console logs (default) or structured JSON logs suitable for production log
aggregators. Level and format come from ``LOG_LEVEL`` / ``LOG_FORMAT`` unless
``configure_logging`` is called with explicit values (the demo server passes
its settings).

Usage
-----
from httpmetrics.utils.logger import get_logger
logger = get_logger(__name__)
logger.info("Something happened")
"""

from __future__ import annotations

import atexit
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

LOG_FORMATS = ("console", "json")

_configured: bool = False


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for machine consumption."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"))


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Initialise the root logger.

    Without arguments this runs once, from the environment. Explicit *level* /
    *fmt* win over the environment and re-apply even if logging is already
    configured.
    """

    global _configured
    if _configured and level is None and fmt is None:
        return

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = (fmt or os.getenv("LOG_FORMAT", "console")).lower()

    handler: logging.Handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    # Reset default handlers to avoid duplicate logs when re-configured (e.g. in tests).
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)
    root.addHandler(handler)

    # Scrapes hit the access log every few seconds.
    logging.getLogger("uvicorn.access").setLevel(os.getenv("UVICORN_LOG_LEVEL", "WARNING"))

    if not _configured:
        atexit.register(logging.shutdown)
    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger with the given *name*, ensuring global config is applied."""

    configure_logging()
    return logging.getLogger(name or __name__)


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


def reset_logging_for_tests() -> None:
    """Clear handlers so tests can reconfigure logging cleanly."""

    global _configured
    root = logging.getLogger()
    for handler in root.handlers:
        handler.flush()
    root.handlers.clear()
    _configured = False
