"""Unit tests for tenant slug validation

Tests cover:
- Accepted slug shapes
- Rejected characters, lengths and trailing line breaks
- require_tenant errors
"""

import pytest

from saas_core.errors.exceptions import TenantException
from saas_core.tenancy.dependencies import is_valid_tenant_slug, require_tenant


class TestTenantSlug:
    @pytest.mark.parametrize("slug", ["acme", "a1", "globex-eu", "0day", "a" * 63])
    def test_valid_slugs(self, slug):
        assert is_valid_tenant_slug(slug)

    @pytest.mark.parametrize("slug", [
        "a",
        "a" * 64,
        "-acme",
        "Acme",
        "acme corp",
        "acme_eu",
        "acme\n",
        "acme\r\n",
        "\nacme",
    ])
    def test_invalid_slugs(self, slug):
        assert not is_valid_tenant_slug(slug)


class TestRequireTenant:
    def test_returns_valid_slug(self):
        assert require_tenant("acme") == "acme"

    def test_missing_tenant(self):
        with pytest.raises(TenantException) as exc_info:
            require_tenant(None)

        assert exc_info.value.message == "Tenant context required"

    def test_trailing_newline_rejected(self):
        with pytest.raises(TenantException) as exc_info:
            require_tenant("acme\n")

        assert exc_info.value.message == "Invalid tenant slug"
        assert exc_info.value.details == {"tenant": "acme\n"}
