"""Business exception hierarchy.

Rule: every business exception is tagged with an ErrorKind, so the global
handler classifies it with one lookup and clients get a stable machine-readable
``code`` in ``details``.
"""

from typing import Any, Dict, List, Mapping, Optional

from .taxonomy import ErrorKind


class BusinessException(Exception):
    """Base class for deliberate, domain-level failures.

    Args:
        message: Client-facing message (defaults to the kind's default message)
        details: Structured payload surfaced in the error envelope; anything
            other than a mapping is kept under a "data" key
        status_code: Overrides the kind's HTTP status
    """
    kind: ErrorKind = ErrorKind.BUSINESS_RULE

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.kind.default_message
        if details is None:
            self.details: Dict[str, Any] = {}
        elif isinstance(details, Mapping):
            self.details = dict(details)
        else:
            self.details = {"data": details}
        self._status_code = status_code
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self._status_code or self.kind.http_status

    @property
    def code(self) -> str:
        return self.kind.code

    def to_details(self) -> Dict[str, Any]:
        """Envelope ``details``: the stable code followed by the payload."""
        return {"code": self.code, **self.details}


class ValidationException(BusinessException):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message=message, details={"errors": errors or []})

    @classmethod
    def for_field(cls, field: str, message: str, error_type: str = "value_error") -> "ValidationException":
        return cls(errors=[{"field": field, "message": message, "type": error_type}])


class UnauthorizedException(BusinessException):
    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message=message)


class ForbiddenException(BusinessException):
    kind = ErrorKind.AUTHORIZATION


class NotFoundException(BusinessException):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, resource_id: Optional[Any] = None):
        details: Dict[str, Any] = {"resource": resource}
        if resource_id is not None:
            details["id"] = str(resource_id)
        super().__init__(message=f"{resource} not found", details=details)


class ConflictException(BusinessException):
    kind = ErrorKind.CONFLICT


class TenantException(BusinessException):
    kind = ErrorKind.TENANT


class RateLimitException(BusinessException):
    kind = ErrorKind.RATE_LIMIT

    def __init__(self, retry_after_seconds: Optional[int] = None):
        details = {"retry_after_seconds": retry_after_seconds} if retry_after_seconds is not None else None
        super().__init__(details=details)
