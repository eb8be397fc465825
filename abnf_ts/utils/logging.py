"""
Structured logging utilities with JSON formatting and context injection.

This module provides structured logging capabilities with:
- JSON formatted log output for machine-readable logs
- Context injection (grammar, attempt, phase) via LoggerAdapter
- Standardized log fields across translation and generation
- Integration with Python's standard logging module
"""

import logging
import json
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, MutableMapping
from logging import LogRecord

CONTEXT_FIELDS = ("grammar", "attempt", "phase", "rule")

_RESERVED_FIELDS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info", "taskName",
    *CONTEXT_FIELDS,
}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON with standard fields:
    - timestamp: ISO 8601 formatted timestamp
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - grammar, attempt, phase, rule: generation context when present
    - context: Additional extra fields
    - error: Error details (when exception info is attached)
    """

    def format(self, record: LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_FIELDS
        }
        if extra_fields:
            log_data["context"] = extra_fields

        if record.exc_info:
            log_data["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stack_trace": "".join(traceback.format_exception(*record.exc_info))
            }

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName
        }

        return json.dumps(log_data, default=str)


class LogContext:
    """
    Context manager for adding temporary context to logs.

    Usage:
        with LogContext(logger, grammar="postal", attempt=2):
            logger.info("Invoking generator")  # Will include grammar and attempt
    """

    def __init__(self, logger: logging.LoggerAdapter, **context: Any):
        self.logger = logger
        self.context = context
        self.old_extra = None

    def __enter__(self) -> logging.LoggerAdapter:
        self.old_extra = self.logger.extra.copy() if self.logger.extra else {}
        self.logger.extra.update(self.context)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.old_extra is not None:
            self.logger.extra = self.old_extra


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects context fields into all log records.

    Per-call ``extra`` fields take precedence over the adapter's context.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextLoggerAdapter":
        """
        Create a new logger adapter with additional context.

        Args:
            **context: Additional context fields

        Returns:
            New logger adapter with merged context
        """
        new_extra = self.extra.copy()
        new_extra.update(context)
        return ContextLoggerAdapter(self.logger, new_extra)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Sets up:
    - JSON formatter for all handlers
    - Console handler with appropriate log level
    - Root logger configuration

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)


def get_logger(name: str, **context: Any) -> ContextLoggerAdapter:
    """
    Get a context-aware logger for a module.

    Args:
        name: Logger name (typically __name__)
        **context: Initial context fields (grammar, attempt, phase, etc.)

    Returns:
        Context logger adapter

    Example:
        logger = get_logger(__name__, grammar="postal")
        logger.info("Translating rules")  # Will include grammar
    """
    base_logger = logging.getLogger(name)
    return ContextLoggerAdapter(base_logger, context)


def log_state_transition(
    logger: logging.LoggerAdapter,
    grammar: str,
    attempt: int,
    from_state: str,
    to_state: str,
) -> None:
    """
    Log a diagnostic-feedback controller state transition.

    Args:
        logger: Logger to use
        grammar: Language name of the grammar being generated
        attempt: Generation attempt number (1-indexed)
        from_state: State being left
        to_state: State being entered
    """
    logger.info(
        f"Controller state {from_state} -> {to_state}",
        extra={
            "grammar": grammar,
            "attempt": attempt,
            "phase": to_state,
            "from_state": from_state,
        }
    )


def log_generator_call(
    logger: logging.LoggerAdapter,
    command: str,
    cwd: str,
    returncode: Optional[int] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None
) -> None:
    """
    Log an external parser-generator invocation.

    Args:
        logger: Logger to use
        command: Command line that was run
        cwd: Working directory of the invocation
        returncode: Exit status (if the process ran)
        duration_ms: Invocation duration in milliseconds (if available)
        error: Diagnostic text (if the invocation failed)
    """
    extra: Dict[str, Any] = {
        "command": command,
        "cwd": cwd,
    }

    if returncode is not None:
        extra["returncode"] = returncode
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    if error:
        logger.error(f"Generator failed: {command}\n{error}", extra=extra)
    else:
        logger.info(f"Generator call: {command}", extra=extra)


def log_unsupported_construct(logger: logging.LoggerAdapter, construct: Any) -> None:
    """
    Log a syntax node that has no translation.

    Args:
        logger: Logger to use
        construct: UnsupportedConstruct record
    """
    logger.error(
        construct.describe(),
        extra={
            "node_kind": construct.node_kind,
            "node_text": construct.text,
            "line": construct.line,
        }
    )


def log_error_with_context(
    logger: logging.LoggerAdapter,
    message: str,
    error: Exception,
    **context: Any
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
        f"{message}: {error}",
        extra=context,
        exc_info=(type(error), error, error.__traceback__)
    )
