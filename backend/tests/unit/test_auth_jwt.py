"""Unit tests for JWT token generation and validation

Tests cover:
- Token creation with valid claims
- Token decoding and validation
- Token expiration handling
- Invalid token handling
- Bearer header parsing
"""

import jwt
import pytest

from saas_core.auth.jwt import bearer_token, create_access_token, decode_token
from saas_core.config import Settings

SECRET = "test-secret-key-256-bits-minimum-length-required-for-security"


@pytest.fixture
def settings():
    return Settings(JWT_SECRET=SECRET, JWT_EXPIRY_MINUTES=60)


class TestCreateAccessToken:
    """Test JWT token creation"""

    def test_create_token_has_three_parts(self, settings):
        token = create_access_token(user_id="user-1", tenant_slug="acme", settings=settings)

        assert isinstance(token, str)
        assert len(token.split('.')) == 3

    def test_token_contains_correct_claims(self, settings):
        """Test token payload contains all expected claims"""
        token = create_access_token(user_id="user-1", tenant_slug="acme", role="admin", settings=settings)

        # Decode without verification to inspect payload
        payload = jwt.decode(token, options={"verify_signature": False})

        assert payload['sub'] == "user-1"
        assert payload['tenant'] == "acme"
        assert payload['role'] == "admin"
        assert payload['exp'] - payload['iat'] == 60 * 60

    def test_optional_claims_omitted(self, settings):
        token = create_access_token(user_id=42, settings=settings)
        payload = jwt.decode(token, options={"verify_signature": False})

        assert payload['sub'] == "42"
        assert 'tenant' not in payload
        assert 'role' not in payload


class TestDecodeToken:
    """Test JWT token decoding and validation"""

    def test_decode_valid_token(self, settings):
        token = create_access_token(user_id="user-1", tenant_slug="acme", settings=settings)

        payload = decode_token(token, settings)

        assert payload['sub'] == "user-1"
        assert payload['tenant'] == "acme"

    def test_decode_expired_token_raises(self, settings):
        expired_settings = Settings(JWT_SECRET=SECRET, JWT_EXPIRY_MINUTES=-1)
        token = create_access_token(user_id="user-1", settings=expired_settings)

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token, settings)

    def test_decode_token_with_wrong_secret_raises(self, settings):
        other = Settings(JWT_SECRET="another-secret-key-that-is-long-enough-for-hs256-signing")
        token = create_access_token(user_id="user-1", settings=other)

        with pytest.raises(jwt.InvalidTokenError):
            decode_token(token, settings)

    def test_decode_garbage_raises(self, settings):
        with pytest.raises(jwt.InvalidTokenError):
            decode_token("not.a.token", settings)


class TestBearerToken:
    """Test Authorization header parsing"""

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc", "abc"),
        ("Basic dXNlcjpwYXNz", None),
        ("Bearer", None),
        ("Bearer a b", None),
        ("", None),
        (None, None),
    ])
    def test_bearer_token(self, header, expected):
        assert bearer_token(header) == expected
