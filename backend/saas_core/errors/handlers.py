"""Global exception handling.

Every failure that escapes a request handler passes through
GlobalErrorNormalizer, which classifies it and renders one ErrorEnvelope.

Classification precedence (first match wins):
    1. Framework exceptions (HTTPException, RequestValidationError): status
       and message pass through unchanged.
    2. BusinessException: status and details from its ErrorKind tag.
    3. Anything else: 500 with a fixed message. The original message and
       stack are logged, never returned.

An exception that is not one of the above is generic even if it happens to
carry ``status_code`` or ``details`` attributes.
"""

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..observability.correlation import DEFAULT_CORRELATION_HEADER, get_request_correlation_id, request_url
from ..observability.logging_config import StructuredLogger, safe_str
from ..observability.metrics import http_errors_total
from .exceptions import BusinessException
from .schemas import INTERNAL_ERROR_MESSAGE, UNKNOWN_CORRELATION_ID, ErrorEnvelope, minimal_internal_envelope
from .taxonomy import ErrorKind, kind_for_status, label_for_status

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


class Failure(NamedTuple):
    """Classified failure, ready to become an envelope."""
    kind: Optional[ErrorKind]
    status_code: int
    message: Union[str, List[str]]
    error: str
    details: Optional[Any] = None
    headers: Optional[Dict[str, str]] = None

    @property
    def is_internal(self) -> bool:
        return self.kind is ErrorKind.INTERNAL


INTERNAL_FAILURE = Failure(
    kind=ErrorKind.INTERNAL,
    status_code=ErrorKind.INTERNAL.http_status,
    message=INTERNAL_ERROR_MESSAGE,
    error=ErrorKind.INTERNAL.label,
)


def utc_timestamp() -> str:
    """Current time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _field_name(loc: Sequence[Any]) -> str:
    parts = list(loc)
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(str(part) for part in parts)


def validation_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """Field-level errors from a request validation failure."""
    return [
        {
            "field": _field_name(error.get("loc", ())),
            "message": error.get("msg", ""),
            "type": error.get("type", "value_error"),
        }
        for error in exc.errors()
    ]


def _http_message(detail: Any, status_code: int) -> Tuple[Union[str, List[str]], Optional[Dict[str, Any]]]:
    """Message and extra details carried by an HTTPException's detail."""
    if isinstance(detail, str):
        return detail, None
    if isinstance(detail, (list, tuple)):
        return [str(item) for item in detail], None
    if isinstance(detail, dict):
        extra = {key: value for key, value in detail.items() if key != "message"}
        message = detail.get("message")
        if message is None:
            message = label_for_status(status_code)
        elif isinstance(message, (list, tuple)):
            message = [str(item) for item in message]
        else:
            message = str(message)
        return message, extra or None
    if detail is None:
        return HTTPStatus(status_code).phrase, None
    return str(detail), None


def classify_exception(exc: BaseException) -> Failure:
    """Map any exception onto a Failure, pass-through > business > generic."""
    if isinstance(exc, RequestValidationError):
        kind = ErrorKind.VALIDATION
        return Failure(
            kind=kind,
            status_code=kind.http_status,
            message=kind.default_message,
            error=kind.label,
            details={"code": kind.code, "errors": validation_errors(exc)},
        )

    if isinstance(exc, StarletteHTTPException):
        message, details = _http_message(exc.detail, exc.status_code)
        return Failure(
            kind=kind_for_status(exc.status_code),
            status_code=exc.status_code,
            message=message,
            error=label_for_status(exc.status_code),
            details=details,
            headers=dict(exc.headers) if exc.headers else None,
        )

    if isinstance(exc, BusinessException):
        headers = None
        retry_after = exc.details.get("retry_after_seconds")
        if exc.kind is ErrorKind.RATE_LIMIT and retry_after is not None:
            headers = {"Retry-After": str(retry_after)}
        return Failure(
            kind=exc.kind,
            status_code=exc.status_code,
            message=exc.message,
            error=exc.kind.label,
            details=exc.to_details(),
            headers=headers,
        )

    return INTERNAL_FAILURE


class GlobalErrorNormalizer:
    """Turns failures into ErrorEnvelopes and JSON responses.

    Usage:
        normalizer = GlobalErrorNormalizer(logger)
        register_exception_handlers(app, normalizer)
    """

    def __init__(self, logger: StructuredLogger, header_name: str = DEFAULT_CORRELATION_HEADER):
        self.logger = logger
        self.header_name = header_name

    def normalize(self, exc: BaseException, request: Request) -> ErrorEnvelope:
        """Build the envelope for a failed request and log it once at error level.

        Never raises: if classification or envelope construction fails, a
        minimal 500 envelope is returned instead.
        """
        return self._normalize(exc, request)[0]

    def _normalize(self, exc: BaseException, request: Request) -> Tuple[ErrorEnvelope, Failure]:
        timestamp = utc_timestamp()
        correlation_id = UNKNOWN_CORRELATION_ID
        path = ""
        build_error: Optional[Exception] = None

        try:
            correlation_id = get_request_correlation_id(request) or UNKNOWN_CORRELATION_ID
            path = request_url(request)
            failure = classify_exception(exc)
            envelope = ErrorEnvelope(
                status_code=failure.status_code,
                message=failure.message,
                error=failure.error,
                details=failure.details,
                timestamp=timestamp,
                path=path,
                correlation_id=correlation_id,
            )
        except Exception as e:
            build_error = e
            failure = INTERNAL_FAILURE
            envelope = ErrorEnvelope.model_construct(
                status_code=failure.status_code,
                message=failure.message,
                error=failure.error,
                details=None,
                timestamp=timestamp,
                path=path,
                correlation_id=correlation_id,
            )

        self._log_failure(exc, request, failure, envelope, build_error)
        http_errors_total.labels(kind=failure.kind.value if failure.kind else "http").inc()
        return envelope, failure

    def _log_failure(
        self,
        exc: BaseException,
        request: Request,
        failure: Failure,
        envelope: ErrorEnvelope,
        build_error: Optional[Exception],
    ) -> None:
        context: Dict[str, Any] = {
            "correlation_id": envelope.correlation_id,
            "path": envelope.path,
            "status_code": envelope.status_code,
            "method": request.scope.get("method"),
            "user_agent": request.headers.get("user-agent"),
            "error_kind": failure.kind.value if failure.kind else None,
        }
        if build_error is not None:
            context["normalization_error"] = f"{type(build_error).__name__}: {safe_str(build_error)}"

        if failure.is_internal:
            summary = f"Unhandled exception: {type(exc).__name__}: {safe_str(exc)}"
        else:
            summary = f"Exception caught: {envelope.message}"
        self.logger.error(summary, exc, context)

    def render(self, envelope: ErrorEnvelope, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        response_headers = dict(headers or {})
        response_headers[self.header_name] = envelope.correlation_id
        try:
            return JSONResponse(
                status_code=envelope.status_code,
                content=jsonable_encoder(envelope.to_response_body()),
                headers=response_headers,
            )
        except Exception as exc:
            self.logger.error("Failed to render error envelope", exc, {"correlation_id": envelope.correlation_id})
            return JSONResponse(
                status_code=500,
                content=minimal_internal_envelope(envelope.timestamp, envelope.path, envelope.correlation_id),
                headers={self.header_name: envelope.correlation_id},
            )

    async def handle(self, request: Request, exc: Exception) -> JSONResponse:
        """Exception handler entry point registered on the application."""
        envelope, failure = self._normalize(exc, request)
        request.state.handled_exception = exc
        return self.render(envelope, failure.headers)


def register_exception_handlers(app: FastAPI, normalizer: GlobalErrorNormalizer) -> None:
    """Route every exception type through the normalizer."""
    app.add_exception_handler(StarletteHTTPException, normalizer.handle)
    app.add_exception_handler(RequestValidationError, normalizer.handle)
    app.add_exception_handler(BusinessException, normalizer.handle)
    app.add_exception_handler(Exception, normalizer.handle)
