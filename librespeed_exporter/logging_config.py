"""Logging configuration for librespeed-exporter."""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from librespeed_exporter.config import Settings, get_settings
from librespeed_exporter.exceptions import ConfigurationError


def add_timestamp(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add timestamp to log entry."""
    from datetime import datetime, timezone

    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def censor_sensitive_keys(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Remove sensitive data from logs."""
    sensitive_keys = {"api_key", "password", "secret", "token", "authorization"}

    for key in list(event_dict.keys()):
        if any(sensitive in key.lower() for sensitive in sensitive_keys):
            event_dict[key] = "***REDACTED***"

    return event_dict


def validate_log_file_path(path: Path | str) -> Path:
    """Check that a log file can be created at path.

    Raises:
        ConfigurationError: If the path is empty or its directory does not exist
    """
    if not str(path):
        raise ConfigurationError("Log file path cannot be empty")

    log_path = Path(path).expanduser()
    directory = log_path.parent
    if not directory.is_dir():
        raise ConfigurationError(
            f"Log file directory does not exist: {directory}", path=str(log_path)
        )
    return log_path


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging to stderr and, if configured, a log file."""
    if settings is None:
        settings = get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        censor_sensitive_keys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty() and settings.log_file is None,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file is not None:
        log_path = validate_log_file_path(settings.log_file)
        handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, settings.log_level),
        force=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)


def log_operation(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    **kwargs: Any,
) -> None:
    """Log an operation with standard context."""
    context = {"operation": operation}
    context.update(kwargs)

    logger.info("operation", **context)


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    operation: str,
    **kwargs: Any,
) -> None:
    """Log an error with standard context."""
    context = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    context.update(kwargs)

    logger.error("operation_failed", **context, exc_info=True)
