"""JWT token generation and validation.

Tokens identify the caller for request logging and tenant fallback.
This module makes no authorization decisions.

Token claims:
- sub: User ID string
- tenant: Tenant slug the token was issued for
- role: Optional role name
- iat / exp: Issued-at and expiration timestamps (seconds)

Example payload:
{
  "sub": "user-42",
  "tenant": "acme",
  "role": "admin",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ..config import Settings, get_settings


def create_access_token(
    user_id: str,
    tenant_slug: Optional[str] = None,
    role: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    """Create a signed access token.

    Args:
        user_id: Subject of the token
        tenant_slug: Tenant the user acts for
        role: Optional role claim
        settings: Settings providing secret, algorithm and expiry

    Returns:
        str: Signed JWT token
    """
    settings = settings or get_settings()

    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=settings.JWT_EXPIRY_MINUTES)

    payload: Dict[str, Any] = {
        'sub': str(user_id),
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp()),
    }
    if tenant_slug:
        payload['tenant'] = tenant_slug
    if role:
        payload['role'] = role

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string
        settings: Settings providing secret and algorithm

    Returns:
        dict: Decoded token payload with claims

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    settings = settings or get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]
