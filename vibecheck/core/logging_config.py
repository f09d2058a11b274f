"""
Logging configuration for VibeCheck.

Everything goes to stderr (or a rotating file) so that the stdio MCP
transport keeps stdout for JSON-RPC. Scan events can be emitted as one
JSON object per line by passing structured fields through ``extra``.
"""

import json
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Any

LOGGER_NAME = "vibecheck"

# Extra fields copied into JSON log entries when present on the record
EVENT_FIELDS = ("event", "tool", "category", "cwe_id", "files", "duration_ms", "error")

TEXT_FORMAT = "[%(asctime)s] %(name)s %(levelname)s: %(message)s"


class ScanEventFormatter(logging.Formatter):
    """Formats records as JSON, including structured scan-event fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in EVENT_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def configure_logging(
    log_level: str = "INFO",
    log_file: str | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """
    Configure the ``vibecheck`` logger hierarchy.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of an hourly-rotated log file
        json_format: Emit JSON lines instead of plain text

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.propagate = False

    logger.handlers.clear()

    formatter: logging.Formatter
    if json_format:
        formatter = ScanEventFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = TimedRotatingFileHandler(
            log_file,
            when="H",
            interval=1,
            backupCount=168,  # 7 days
            encoding="utf-8",
        )
        file_handler.setFormatter(ScanEventFormatter())
        logger.addHandler(file_handler)

    return logger
