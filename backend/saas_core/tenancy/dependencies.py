"""FastAPI dependencies for tenant and user context.

Usage:
    @router.get("/entities")
    def list_entities(tenant: str = Depends(require_tenant)):
        ...
"""

import re
from typing import Optional

from fastapi import Depends, Request

from ..errors.exceptions import TenantException, UnauthorizedException
from .middleware import get_tenant_from_request, get_user_from_request

TENANT_SLUG_PATTERN = re.compile(r"[a-z0-9][a-z0-9-]{1,62}")


def is_valid_tenant_slug(slug: str) -> bool:
    return TENANT_SLUG_PATTERN.fullmatch(slug) is not None


def get_tenant_slug(request: Request) -> Optional[str]:
    """Current tenant slug, if any."""
    return get_tenant_from_request(request)


def require_tenant(tenant_slug: Optional[str] = Depends(get_tenant_slug)) -> str:
    """Tenant slug for the request.

    Raises:
        TenantException: If no tenant context is present or the slug is malformed
    """
    if not tenant_slug:
        raise TenantException("Tenant context required")
    if not is_valid_tenant_slug(tenant_slug):
        raise TenantException("Invalid tenant slug", details={"tenant": tenant_slug})
    return tenant_slug


def get_current_user_id(request: Request) -> Optional[str]:
    """Current user ID, if a valid bearer token was presented."""
    return get_user_from_request(request)


def require_user(user_id: Optional[str] = Depends(get_current_user_id)) -> str:
    """User ID for the request.

    Raises:
        UnauthorizedException: If no valid bearer token was presented
    """
    if not user_id:
        raise UnauthorizedException()
    return user_id
