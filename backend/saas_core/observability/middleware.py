"""FastAPI middleware for request observability.

Resolves the correlation ID and logs every request/response pair with
method, URL, client, tenant, user, status and latency.
"""

import time
from typing import Any, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .correlation import (
    DEFAULT_CORRELATION_HEADER,
    bind_correlation_id,
    client_ip,
    ensure_correlation_id,
    request_url,
    reset_correlation_id,
)
from .logging_config import StructuredLogger
from .metrics import record_request


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


def _status_from_exception(exc: BaseException) -> int:
    try:
        status_code = getattr(exc, "status_code", None)
    except Exception:
        return 500
    return status_code if isinstance(status_code, int) else 500


class RequestObservabilityMiddleware(BaseHTTPMiddleware):
    """Middleware that emits one request log and one response (or error) log per request.

    Failures are observed, never swallowed: an exception escaping the handler is
    logged and re-raised unchanged for the error handlers. Exceptions that an
    exception handler already turned into a response are reported by the
    handler through request.state.handled_exception.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: StructuredLogger,
        header_name: str = DEFAULT_CORRELATION_HEADER,
        enabled: bool = True,
    ):
        super().__init__(app)
        self.logger = logger
        self.header_name = header_name
        self.enabled = enabled

    def _request_context(self, request: Request, correlation_id: str) -> Dict[str, Any]:
        return {
            "method": request.method,
            "url": request_url(request),
            "ip": client_ip(request),
            "user_agent": request.headers.get("user-agent", ""),
            "correlation_id": correlation_id,
            "tenant_id": getattr(request.state, "tenant_slug", None),
            "user_id": getattr(request.state, "user_id", None),
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with correlation and timing.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response: HTTP response with the correlation header set
        """
        correlation_id = ensure_correlation_id(request, self.header_name)
        token = bind_correlation_id(correlation_id)

        method = request.method
        url = request_url(request)
        context = self._request_context(request, correlation_id)
        start_time = time.perf_counter()

        try:
            if self.enabled:
                self.logger.http_request(method, url, context)

            try:
                response = await call_next(request)
            except Exception as exc:
                response_time = _elapsed_ms(start_time)
                status_code = _status_from_exception(exc)
                record_request(method, status_code, response_time / 1000)
                if self.enabled:
                    self.logger.error(
                        f"HTTP {method} {url} {status_code} {response_time}ms",
                        exc,
                        {**context, "status_code": status_code, "response_time_ms": response_time},
                    )
                raise

            response_time = _elapsed_ms(start_time)
            record_request(method, response.status_code, response_time / 1000)

            if self.enabled:
                handled = getattr(request.state, "handled_exception", None)
                if handled is not None:
                    self.logger.error(
                        f"HTTP {method} {url} {response.status_code} {response_time}ms",
                        handled,
                        {**context, "status_code": response.status_code, "response_time_ms": response_time},
                    )
                else:
                    self.logger.http_response(method, url, response.status_code, response_time, context)

            response.headers[self.header_name] = correlation_id
            return response
        finally:
            reset_correlation_id(token)
