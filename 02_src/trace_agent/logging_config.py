"""Structured logging configuration for the trace agent."""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path

# Above CRITICAL, so nothing is emitted
DISABLED = logging.CRITICAL + 10
logging.addLevelName(DISABLED, "DISABLED")

# GCLOUD_TRACE_LOGLEVEL uses 0=disabled, 1=error, 2=warn, 3=info, 4=debug
NUMERIC_LOG_LEVELS = {
    0: "DISABLED",
    1: "ERROR",
    2: "WARNING",
    3: "INFO",
    4: "DEBUG",
}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra context if present
        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


def level_from_numeric(value: int | str) -> str:
    """Map a 0..4 agent log level to a logging level name."""
    level = max(0, min(4, int(value)))
    return NUMERIC_LOG_LEVELS[level]


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
) -> None:
    """
    Setup structured logging for the agent.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to TRACE_AGENT_LOG_LEVEL, then the numeric
                   GCLOUD_TRACE_LOGLEVEL, then ERROR.
        log_file: Optional path to a rotating log file.
    """
    if log_level is None:
        log_level = os.getenv("TRACE_AGENT_LOG_LEVEL")
    if log_level is None:
        numeric = os.getenv("GCLOUD_TRACE_LOGLEVEL")
        log_level = level_from_numeric(numeric) if numeric else "ERROR"

    handlers: dict = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    }

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "trace_agent.logging_config.JSONFormatter",
            },
        },
        "handlers": handlers,
        "root": {
            "level": log_level.upper(),
            "handlers": list(handlers),
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
