"""Logging configuration for flatlock."""

import logging
import os
import sys
from typing import Any, Dict


def setup_logging(level: str | None = None, structured: bool | None = None) -> logging.Logger:
    """
    Set up the flatlock logger.

    flatlock is primarily a library, so the default level is WARNING and
    parsers only talk at DEBUG. Both settings fall back to environment
    variables when not passed explicitly.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
            Defaults to FLATLOCK_LOG_LEVEL or WARNING.
        structured: Whether to use structured JSON logging.
            Defaults to FLATLOCK_LOG_FORMAT == "json".

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("flatlock")

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    if level is None:
        level = os.getenv("FLATLOCK_LOG_LEVEL", "WARNING")
    if structured is None:
        structured = os.getenv("FLATLOCK_LOG_FORMAT", "").lower() == "json"

    log_level = getattr(logging, level.upper(), logging.WARNING)
    logger.setLevel(log_level)

    # stderr keeps stdout clean for CLI output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    if structured:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s - %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        import json
        from datetime import datetime

        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


# Global logger instance
logger = setup_logging()
