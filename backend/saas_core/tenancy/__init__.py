"""Tenancy module - tenant and user context for requests.

This module provides:
- Tenant slug and user ID extraction onto request.state
- Dependencies that require a tenant or user
"""

from .dependencies import get_current_user_id, get_tenant_slug, require_tenant, require_user
from .middleware import TenantContextMiddleware

__all__ = [
    "TenantContextMiddleware",
    "get_current_user_id",
    "get_tenant_slug",
    "require_tenant",
    "require_user",
]
