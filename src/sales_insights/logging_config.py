"""
Logging setup for the CLI.

LOG_LEVEL picks the level (default WARNING, so stdout stays pure JSON and stderr quiet);
LOG_FORMAT is "text" (default) or "json" for one JSON object per line.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional


class JSONFormatter(logging.Formatter):
    """Single-line JSON log records."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


_NOISY_LOGGERS = ["httpx", "httpcore"]


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install one stderr handler on the root logger; arguments override LOG_LEVEL / LOG_FORMAT."""
    level_name = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    resolved = getattr(logging, level_name, logging.WARNING)
    log_format = (fmt or os.getenv("LOG_FORMAT", "text")).lower()

    root = logging.getLogger()
    root.setLevel(resolved)
    # Re-running replaces the handler instead of stacking another
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
