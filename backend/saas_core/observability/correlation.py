"""Correlation ID management for request tracing.

Provides context-aware correlation ID generation and propagation across async operations.
An inbound correlation header is reused verbatim so traces can span services.
"""

import random
import time
import uuid
from contextvars import ContextVar, Token
from typing import Mapping, Optional

from starlette.requests import Request

DEFAULT_CORRELATION_HEADER = "x-correlation-id"

# Context variable for correlation_id (async-safe)
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    """Generate a new unique correlation ID.

    Returns:
        str: UUID v4 string, or "<epoch-ms>-<hex>" if the OS randomness source is unavailable
    """
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        return f"{int(time.time() * 1000)}-{random.getrandbits(64):016x}"


def resolve_correlation_id(
    headers: Mapping[str, str],
    header_name: str = DEFAULT_CORRELATION_HEADER,
) -> str:
    """Return the correlation ID carried by headers, or a fresh one.

    Args:
        headers: Inbound request headers (any mapping; lookup is case-insensitive)
        header_name: Header to read

    Returns:
        str: The inbound value verbatim, or a newly generated ID
    """
    wanted = header_name.lower()
    for key, value in headers.items():
        if key.lower() == wanted and value:
            return value
    return generate_correlation_id()


def ensure_correlation_id(request: Request, header_name: str = DEFAULT_CORRELATION_HEADER) -> str:
    """Resolve the request's correlation ID once and attach it to the request.

    Subsequent calls for the same request return the stored value.

    Args:
        request: Incoming HTTP request
        header_name: Header to read the inbound ID from

    Returns:
        str: Correlation ID for this request
    """
    existing = getattr(request.state, "correlation_id", None)
    if existing:
        return existing

    correlation_id = resolve_correlation_id(request.headers, header_name)
    request.state.correlation_id = correlation_id
    return correlation_id


def get_request_correlation_id(request: Request) -> Optional[str]:
    """Correlation ID previously attached to the request, if any."""
    return getattr(request.state, "correlation_id", None)


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID bound to the current context."""
    return correlation_id_var.get()


def bind_correlation_id(correlation_id: str) -> Token:
    """Bind a correlation ID to the current context.

    Returns:
        Token: pass to reset_correlation_id() when the request is done
    """
    return correlation_id_var.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    correlation_id_var.reset(token)


def request_url(request: Request) -> str:
    """Path plus query string, the way the URL is shown in logs and envelopes."""
    path = request.url.path
    query = request.url.query
    return f"{path}?{query}" if query else path


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None
