"""Centralized logging configuration for the application."""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict
from contextvars import ContextVar

from expense_claims.config import settings

# Context variables for request and claim tracking
request_id_context: ContextVar[str] = ContextVar("request_id", default="")
claim_id_context: ContextVar[str] = ContextVar("claim_id", default="")

# LogRecord attributes that are not user-supplied context
_RESERVED_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName",
    "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "extra_fields", "taskName",
})


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "service": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
        }

        request_id = request_id_context.get()
        if request_id:
            log_data["request_id"] = request_id

        claim_id = claim_id_context.get()
        if claim_id:
            log_data["claim_id"] = claim_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(extra_fields)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable console formatter with colored level names."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        level = f"{color}{record.levelname}{self.RESET}" if color else record.levelname

        request_id = request_id_context.get()
        request_id_str = f" [req:{request_id[:8]}]" if request_id else ""
        claim_id = claim_id_context.get()
        claim_id_str = f" [claim:{claim_id}]" if claim_id else ""

        formatted = (
            f"{self.formatTime(record, self.datefmt)} - "
            f"{level} - "
            f"{record.name} - "
            f"{record.getMessage()}"
            f"{request_id_str}"
            f"{claim_id_str}"
        )

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def setup_logging() -> None:
    """
    Configure application-wide logging.

    This should be called once at application startup.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if settings.LOG_JSON_FORMAT:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Quieter third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured - Level: {settings.LOG_LEVEL}, "
        f"Format: {'JSON' if settings.LOG_JSON_FORMAT else 'Colored'}, "
        f"Environment: {settings.ENVIRONMENT}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra_fields: Any
) -> None:
    """
    Log a message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, logging.ERROR, etc.)
        message: Log message
        **extra_fields: Additional fields to include in log
    """
    if extra_fields:
        logger.log(level, message, extra={"extra_fields": extra_fields})
    else:
        logger.log(level, message)


def bind_claim_context(claim_id: str) -> None:
    """Tag the remaining log lines of the current request with a claim ID."""
    claim_id_context.set(claim_id)
