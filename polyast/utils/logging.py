"""
Structured logging utilities with JSON formatting and context injection.

This module provides structured logging capabilities with:
- JSON formatted log output for machine-readable logs
- Context injection (language, file_path, parser_state) via LoggerAdapter
- Standardized log fields for parse and lifecycle events
- Integration with Python's standard logging module
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from logging import LogRecord
from typing import Any, Dict, MutableMapping, Optional

from polyast.config import settings

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_FIELDS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info", "taskName",
})

# Context fields promoted to the top level of the JSON document
_CONTEXT_FIELDS = ("language", "file_path", "parser_state", "operation")


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON with standard fields:
    - timestamp: ISO 8601 formatted timestamp
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - language / file_path / parser_state / operation: promoted context fields
    - context: Any other extra fields
    - error: Error details when exception info is attached
    """

    def format(self, record: LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in _CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_FIELDS and key not in _CONTEXT_FIELDS
        }
        if extra_fields:
            log_data["context"] = extra_fields

        if record.exc_info:
            log_data["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stack_trace": "".join(traceback.format_exception(*record.exc_info)),
            }

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class LogContext:
    """
    Context manager for adding temporary context to logs.

    Usage:
        with LogContext(logger, language="java", file_path="Main.java"):
            logger.info("Parsing")  # Will include language and file_path
    """

    def __init__(self, logger: logging.LoggerAdapter, **context: Any):
        self.logger = logger
        self.context = context
        self.old_extra: Optional[Dict[str, Any]] = None

    def __enter__(self) -> logging.LoggerAdapter:
        self.old_extra = dict(self.logger.extra) if self.logger.extra else {}
        self.logger.extra = {**self.old_extra, **self.context}
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.old_extra is not None:
            self.logger.extra = self.old_extra


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects context fields into all log records.

    Explicit ``extra`` passed to a logging call wins over adapter context.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextLoggerAdapter":
        """
        Create a new logger adapter with additional context.

        Args:
            **context: Additional context fields

        Returns:
            New logger adapter with merged context
        """
        return ContextLoggerAdapter(self.logger, {**self.extra, **context})


def setup_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Sets up a JSON console handler on the root logger.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            defaults to the configured POLYAST_LOG_LEVEL
    """
    if log_level is None:
        log_level = settings.log_level
    log_level = log_level.upper()

    formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str, **context: Any) -> ContextLoggerAdapter:
    """
    Get a context-aware logger for a module.

    Args:
        name: Logger name (typically __name__)
        **context: Initial context fields (language, file_path, etc.)

    Example:
        logger = get_logger(__name__, language="java")
        logger.info("Grammar loaded")  # Will include language
    """
    return ContextLoggerAdapter(logging.getLogger(name), context)


def log_parse_event(
    logger: logging.LoggerAdapter,
    language: str,
    file_path: Optional[str],
    duration_ms: float,
    node_count: Optional[int] = None,
    error_count: Optional[int] = None,
    error: Optional[str] = None,
) -> None:
    """
    Log the outcome of a single parse call.

    Args:
        logger: Logger to use
        language: Language of the parser
        file_path: Parsed file path, if known
        duration_ms: Time spent in the parse call
        node_count: Number of nodes in the resulting tree
        error_count: Number of syntax errors in the resulting tree
        error: Failure message when the parse failed
    """
    extra: Dict[str, Any] = {
        "language": language,
        "file_path": file_path,
        "operation": "parse",
        "duration_ms": round(duration_ms, 2),
    }
    if node_count is not None:
        extra["node_count"] = node_count
    if error_count is not None:
        extra["error_count"] = error_count

    if error is not None:
        extra["error"] = error
        logger.error(f"Failed to parse {language} source", extra=extra)
    else:
        logger.debug(f"Parsed {language} source", extra=extra)


def log_lifecycle_transition(
    logger: logging.LoggerAdapter,
    language: str,
    from_state: str,
    to_state: str,
) -> None:
    """
    Log a parser lifecycle state change.

    Args:
        logger: Logger to use
        language: Language of the parser
        from_state: Previous lifecycle state
        to_state: New lifecycle state
    """
    logger.debug(
        f"Parser state {from_state} -> {to_state}",
        extra={
            "language": language,
            "parser_state": to_state,
            "previous_state": from_state,
        },
    )


def log_error_with_context(
    logger: logging.LoggerAdapter,
    message: str,
    error: Exception,
    **context: Any,
) -> None:
    """
    Log error with full stack trace and context.

    Args:
        logger: Logger to use
        message: Error message
        error: Exception object
        **context: Additional context fields
    """
    logger.error(
        message,
        extra={**context, "error_type": type(error).__name__},
        exc_info=(type(error), error, error.__traceback__),
    )
