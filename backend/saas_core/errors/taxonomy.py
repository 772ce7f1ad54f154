"""Error taxonomy.

The fixed table of failure categories. Every HTTP status the application
assigns to an error comes from here: business exceptions take their status
from their kind, and the global error handlers label pass-through HTTP
exceptions and unknown failures with it.
"""

from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Dict, Optional

from starlette import status


class ErrorKind(str, Enum):
    """Closed set of error categories."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TENANT = "tenant"
    RATE_LIMIT = "rate_limit"
    BUSINESS_RULE = "business_rule"
    INTERNAL = "internal"

    @property
    def info(self) -> "ErrorKindInfo":
        return ERROR_TAXONOMY[self]

    @property
    def http_status(self) -> int:
        return ERROR_TAXONOMY[self].http_status

    @property
    def default_message(self) -> str:
        return ERROR_TAXONOMY[self].default_message

    @property
    def code(self) -> str:
        return ERROR_TAXONOMY[self].code

    @property
    def label(self) -> str:
        return ERROR_TAXONOMY[self].label


@dataclass(frozen=True)
class ErrorKindInfo:
    """Static description of one error kind."""
    kind: ErrorKind
    http_status: int
    default_message: str
    code: str
    label: str


ERROR_TAXONOMY: Dict[ErrorKind, ErrorKindInfo] = {
    info.kind: info
    for info in (
        ErrorKindInfo(ErrorKind.VALIDATION, status.HTTP_422_UNPROCESSABLE_ENTITY,
                      "Validation failed", "VALIDATION_ERROR", "Validation Error"),
        ErrorKindInfo(ErrorKind.AUTHENTICATION, status.HTTP_401_UNAUTHORIZED,
                      "Unauthorized", "UNAUTHORIZED", "Unauthorized"),
        ErrorKindInfo(ErrorKind.AUTHORIZATION, status.HTTP_403_FORBIDDEN,
                      "Forbidden", "FORBIDDEN", "Forbidden"),
        ErrorKindInfo(ErrorKind.NOT_FOUND, status.HTTP_404_NOT_FOUND,
                      "Not Found", "NOT_FOUND", "Not Found"),
        ErrorKindInfo(ErrorKind.CONFLICT, status.HTTP_409_CONFLICT,
                      "Conflict", "CONFLICT", "Conflict"),
        ErrorKindInfo(ErrorKind.TENANT, status.HTTP_403_FORBIDDEN,
                      "Tenant access denied", "TENANT_ERROR", "Tenant Error"),
        ErrorKindInfo(ErrorKind.RATE_LIMIT, status.HTTP_429_TOO_MANY_REQUESTS,
                      "Too Many Requests", "RATE_LIMITED", "Too Many Requests"),
        ErrorKindInfo(ErrorKind.BUSINESS_RULE, status.HTTP_400_BAD_REQUEST,
                      "Bad Request", "BUSINESS_RULE_VIOLATION", "Bad Request"),
        ErrorKindInfo(ErrorKind.INTERNAL, status.HTTP_500_INTERNAL_SERVER_ERROR,
                      "Internal Server Error", "INTERNAL_ERROR", "Internal Server Error"),
    )
}

# Tenant errors share 403 with authorization; a bare 403 reads as authorization.
_KIND_BY_STATUS: Dict[int, ErrorKind] = {
    info.http_status: kind
    for kind, info in reversed(list(ERROR_TAXONOMY.items()))
}


def kind_for_status(status_code: int) -> Optional[ErrorKind]:
    """Error kind whose status matches, or None for statuses outside the table."""
    return _KIND_BY_STATUS.get(status_code)


def label_for_status(status_code: int) -> str:
    """Human-readable category for an arbitrary HTTP status."""
    kind = kind_for_status(status_code)
    if kind is not None:
        return kind.label
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"
