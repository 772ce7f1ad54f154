"""Structured JSON logging.

Provides centralized logging setup with correlation ID stamping and JSON formatting,
plus the StructuredLogger used by middleware, error handlers and repositories.

Every StructuredLogger call builds an immutable LogRecord and hands it to a sink.
The default sink forwards records into the stdlib logging tree configured here;
any object with a write(record) method can replace it.
"""

import json
import logging
import sys
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Protocol

from .correlation import get_correlation_id

VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")


class LogLevel(str, Enum):
    """Severity levels exposed by StructuredLogger."""
    DEBUG = "debug"
    VERBOSE = "verbose"
    LOG = "log"
    WARN = "warn"
    ERROR = "error"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def parse(cls, value: "str | LogLevel") -> "LogLevel":
        """Accept our level names plus the stdlib spellings (info, warning)."""
        if isinstance(value, LogLevel):
            return value
        name = value.strip().lower()
        return _ALIASES.get(name) or cls(name)


_SEVERITY = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.VERBOSE: VERBOSE,
    LogLevel.LOG: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

_ALIASES = {
    "info": LogLevel.LOG,
    "warning": LogLevel.WARN,
    "critical": LogLevel.ERROR,
}


@dataclass(frozen=True)
class LogRecord:
    """One structured log event. Never mutated after creation."""
    level: LogLevel
    message: str
    context: Mapping[str, Any]
    timestamp: datetime


class LogSink(Protocol):
    def write(self, record: LogRecord) -> None:
        ...


class CorrelationIdFilter(logging.Filter):
    """Add correlation_id to all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation_id attribute to log record.

        Args:
            record: Log record to enhance

        Returns:
            bool: Always True (don't filter out records)
        """
        if not getattr(record, "correlation_id", None):
            context = getattr(record, "context", None) or {}
            record.correlation_id = context.get("correlation_id") or get_correlation_id() or "no-correlation-id"
        return True


class JSONFormatter(logging.Formatter):
    """Format log records as JSON."""

    RESERVED = ("timestamp", "level", "logger", "correlation_id", "message")

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string.

        Args:
            record: Log record to format

        Returns:
            str: JSON-formatted log message
        """
        log_data = {
            "timestamp": getattr(record, "event_time", None)
            or datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", "no-correlation-id"),
            "message": record.getMessage(),
        }

        # Structured context from StructuredLogger
        context = getattr(record, "context", None)
        if context:
            for key, value in context.items():
                if key not in self.RESERVED:
                    log_data[key] = value

        # Add exception info if present
        if record.exc_info:
            log_data["error"] = safe_str(record.exc_info[1])
            log_data["traceback"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class LoggingSink:
    """Sink that forwards LogRecords into the stdlib logging tree."""

    def __init__(self, logger_name: str = "saas_core"):
        self._logger = logging.getLogger(logger_name)

    def write(self, record: LogRecord) -> None:
        self._logger.log(
            record.level.severity,
            record.message,
            extra={
                "context": dict(record.context),
                "event_time": record.timestamp.isoformat(),
                "correlation_id": record.context.get("correlation_id"),
            },
        )

    def close(self) -> None:
        for handler in self._logger.handlers + logging.getLogger().handlers:
            handler.flush()


def safe_str(value: Any) -> str:
    """str(value), or a placeholder when the object's __str__ raises."""
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _error_details(error: BaseException) -> dict:
    try:
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    except Exception:
        stack = f"<unavailable stack for {type(error).__name__}>"
    return {"error_type": type(error).__name__, "error": safe_str(error), "stack": stack}


def _report_sink_failure(exc: Exception) -> None:
    """Last-resort report when a sink raises. Logging must never abort a request."""
    if sys.stderr is None:
        return
    try:
        sys.stderr.write(f"Log sink failure: {exc!r}\n")
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
    except OSError:
        pass


class StructuredLogger:
    """Leveled logger producing structured records with key/value context.

    Usage:
        logger = StructuredLogger(LoggingSink(), level="debug")
        logger.log("Entity created", {"entity_id": entity.id})
        logger.error("Import failed", exc, {"tenant_id": tenant})
    """

    def __init__(self, sink: LogSink, level: "str | LogLevel" = LogLevel.DEBUG, method_logging: bool = True):
        self.sink = sink
        self.level = LogLevel.parse(level)
        self.method_logging = method_logging

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level.severity >= self.level.severity

    def _emit(self, level: LogLevel, message: str, context: Optional[Mapping[str, Any]]) -> None:
        if not self.is_enabled_for(level):
            return
        try:
            data = dict(context) if context else {}
            if "correlation_id" not in data:
                correlation_id = get_correlation_id()
                if correlation_id:
                    data["correlation_id"] = correlation_id
            record = LogRecord(
                level=level,
                message=message,
                context=MappingProxyType(data),
                timestamp=datetime.now(timezone.utc),
            )
            self.sink.write(record)
        except Exception as exc:
            _report_sink_failure(exc)

    def debug(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self._emit(LogLevel.DEBUG, message, context)

    def verbose(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self._emit(LogLevel.VERBOSE, message, context)

    def log(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self._emit(LogLevel.LOG, message, context)

    def warn(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self._emit(LogLevel.WARN, message, context)

    def error(
        self,
        message: str,
        error: Optional[BaseException | str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Log at error level.

        The error's type, text and stack go into the context so the message
        stays a one-line summary.
        """
        data = dict(context) if context else {}
        if isinstance(error, BaseException):
            data.update(_error_details(error))
        elif error is not None:
            data["error"] = safe_str(error)
        self._emit(LogLevel.ERROR, message, data)

    def http_request(self, method: str, url: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.log(f"HTTP {method} {url}", {**(context or {}), "type": "http_request"})

    def http_response(
        self,
        method: str,
        url: str,
        status_code: int,
        response_time_ms: float,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.log(
            f"HTTP {method} {url} {status_code} {response_time_ms}ms",
            {
                **(context or {}),
                "type": "http_response",
                "status_code": status_code,
                "response_time_ms": response_time_ms,
            },
        )

    def close(self) -> None:
        """Flush and release the sink, if it supports it."""
        close = getattr(self.sink, "close", None)
        if close is None:
            return
        try:
            close()
        except Exception as exc:
            _report_sink_failure(exc)


def configure_logging(level: str = "INFO", json_format: bool = True) -> None:
    """Configure application-wide logging.

    Args:
        level: Log level (debug, verbose, info/log, warn/warning, error)
        json_format: If True, use JSON formatter; otherwise use simple format
    """
    severity = LogLevel.parse(level).severity

    # Get root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(severity)

    # Remove existing handlers
    root_logger.handlers.clear()

    # Create console handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(severity)

    # Set formatter
    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(correlation_id)s - %(name)s - %(message)s'
        )

    handler.setFormatter(formatter)

    # Add correlation ID filter
    handler.addFilter(CorrelationIdFilter())

    # Add handler to root logger
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a stdlib logger instance (typically for module-level diagnostics)."""
    return logging.getLogger(name)
