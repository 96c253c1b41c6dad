"""
Logging Configuration

Configures logging for the application.
Output goes to stderr to keep stdout clean for user-facing reports.
Optionally mirrors records as JSON lines into a daily log file.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional


class JsonLineFormatter(logging.Formatter):
    """Formats a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["error"] = {
                "name": exc_type.__name__ if exc_type else "",
                "message": str(exc_value),
                "stack": self.formatException(record.exc_info),
            }
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(verbose: bool = False, quiet: bool = False, log_dir: Optional[str] = None) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, set level to DEBUG
        quiet: If True, set level to WARNING
        log_dir: If set, also write JSON lines to <log_dir>/crawl-YYYY-MM-DD.log
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)-8s %(name)s: %(message)s"))

    logger = logging.getLogger("catalog_crawler")
    logger.setLevel(level)

    # Avoid duplicate handlers if called multiple times
    for existing in logger.handlers:
        existing.close()
    logger.handlers.clear()
    logger.addHandler(handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        filename = f"crawl-{datetime.now().strftime('%Y-%m-%d')}.log"
        file_handler = logging.FileHandler(os.path.join(log_dir, filename), encoding="utf-8")
        file_handler.setFormatter(JsonLineFormatter())
        logger.addHandler(file_handler)
