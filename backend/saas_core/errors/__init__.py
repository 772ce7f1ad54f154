"""Error taxonomy, business exceptions and the global error normalizer."""

from .exceptions import (
    BusinessException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    RateLimitException,
    TenantException,
    UnauthorizedException,
    ValidationException,
)
from .handlers import GlobalErrorNormalizer, classify_exception, register_exception_handlers
from .schemas import ErrorEnvelope
from .taxonomy import ERROR_TAXONOMY, ErrorKind

__all__ = [
    "BusinessException",
    "ConflictException",
    "ForbiddenException",
    "NotFoundException",
    "RateLimitException",
    "TenantException",
    "UnauthorizedException",
    "ValidationException",
    "GlobalErrorNormalizer",
    "classify_exception",
    "register_exception_handlers",
    "ErrorEnvelope",
    "ERROR_TAXONOMY",
    "ErrorKind",
]
