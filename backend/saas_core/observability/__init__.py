"""Observability module.

Provides correlation IDs, structured logging, request logging middleware,
metrics, and health checks.
"""

from .correlation import (
    DEFAULT_CORRELATION_HEADER,
    correlation_id_var,
    ensure_correlation_id,
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
)
from .health import ComponentHealth, HealthReport, HealthStatus, run_health_checks
from .log_method import log_method
from .logging_config import (
    LoggingSink,
    LogLevel,
    LogRecord,
    StructuredLogger,
    configure_logging,
    get_logger,
)
from .middleware import RequestObservabilityMiddleware

__all__ = [
    # Correlation
    "DEFAULT_CORRELATION_HEADER",
    "correlation_id_var",
    "ensure_correlation_id",
    "generate_correlation_id",
    "get_correlation_id",
    "resolve_correlation_id",
    # Logging
    "LoggingSink",
    "LogLevel",
    "LogRecord",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "log_method",
    # Health
    "HealthStatus",
    "ComponentHealth",
    "HealthReport",
    "run_health_checks",
    # Middleware
    "RequestObservabilityMiddleware",
]
