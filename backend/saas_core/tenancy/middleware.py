"""Middleware for tenant and user context extraction.

Attaches ``tenant_slug`` and ``user_id`` to request.state before the
observability middleware logs the request. Nothing here rejects a request;
endpoints that need a tenant or user use the dependencies in
``tenancy.dependencies``.
"""

from typing import Callable, Optional

import jwt
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..auth.jwt import bearer_token, decode_token
from ..config import Settings, get_settings

TENANT_QUERY_PARAM = "tenantSlug"


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Middleware to attach tenant slug and user ID to request state.

    Tenant slug sources, first match wins:
    1. Tenant header (default ``x-tenant-slug``)
    2. ``tenantSlug`` query parameter
    3. ``tenant`` claim of a valid bearer token

    The user ID is the ``sub`` claim of a valid bearer token. Missing or
    invalid tokens leave it as None.

    Usage:
        app.add_middleware(TenantContextMiddleware, settings=settings)

        @app.get("/entities")
        def list_entities(request: Request):
            tenant = request.state.tenant_slug  # str or None
    """

    def __init__(self, app: ASGIApp, settings: Optional[Settings] = None):
        super().__init__(app)
        self.settings = settings or get_settings()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and attach tenant/user context to request.state.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler in chain

        Returns:
            Response: FastAPI response object
        """
        claims = self._token_claims(request)

        request.state.user_id = claims.get("sub")
        request.state.tenant_slug = (
            request.headers.get(self.settings.TENANT_HEADER)
            or request.query_params.get(TENANT_QUERY_PARAM)
            or claims.get("tenant")
        )

        return await call_next(request)

    def _token_claims(self, request: Request) -> dict:
        token = bearer_token(request.headers.get("Authorization"))
        if not token:
            return {}
        try:
            return decode_token(token, self.settings)
        except jwt.InvalidTokenError:
            # Actual rejection happens in require_user
            return {}


def get_tenant_from_request(request: Request) -> Optional[str]:
    """Tenant slug set by TenantContextMiddleware, or None."""
    return getattr(request.state, "tenant_slug", None)


def get_user_from_request(request: Request) -> Optional[str]:
    """User ID set by TenantContextMiddleware, or None."""
    return getattr(request.state, "user_id", None)
