"""Structured logging configuration for the PDF RAG chat."""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Set up structured JSON logging.

    Log lines go to stderr unless ``log_file`` is given, so they never
    interleave with the chat on stdout.

    Args:
        log_level: Name of the root log level (e.g. "INFO")
        log_file: Optional path of a file to append log lines to
    """
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))
    for existing in list(root_logger.handlers):
        if isinstance(existing.formatter, JSONFormatter):
            root_logger.removeHandler(existing)
            existing.close()
    root_logger.addHandler(handler)
