"""
Logging setup for the sticker exporter.

All diagnostics go to a single stream handler on the root logger (stderr by
default) so standard output stays reserved for the list of downloaded files.

Two formats:
  - text: ``%(asctime)s %(levelname)s %(name)s %(message)s``
  - json: one JSON object per line, see JsonFormatter

Extra fields passed via ``logger.info("...", extra={"sticker_id": ...})``
are carried into JSON records.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import IO

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Keys copied from LogRecord attributes into JSON output when present
EXTRA_FIELDS = ("sticker_id", "archive", "url", "attempt", "path")


class JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                data[key] = getattr(record, key)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Configure application-wide logging.

    Replaces any handlers already installed on the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'text' or 'json'
        stream: Output stream (default: sys.stderr at call time)

    Returns:
        The installed handler.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logging.basicConfig(
        handlers=[handler],
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    return handler
