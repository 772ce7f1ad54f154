"""Unit tests for the error taxonomy and business exceptions

Tests cover:
- Status, default message, code and label of every error kind
- Status lookups for pass-through HTTP errors
- Business exception defaults, overrides and details
"""

import pytest

from saas_core.errors.exceptions import (
    BusinessException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    RateLimitException,
    TenantException,
    UnauthorizedException,
    ValidationException,
)
from saas_core.errors.taxonomy import ERROR_TAXONOMY, ErrorKind, kind_for_status, label_for_status


class TestErrorTaxonomy:
    @pytest.mark.parametrize("kind,status_code,code,label", [
        (ErrorKind.VALIDATION, 422, "VALIDATION_ERROR", "Validation Error"),
        (ErrorKind.AUTHENTICATION, 401, "UNAUTHORIZED", "Unauthorized"),
        (ErrorKind.AUTHORIZATION, 403, "FORBIDDEN", "Forbidden"),
        (ErrorKind.NOT_FOUND, 404, "NOT_FOUND", "Not Found"),
        (ErrorKind.CONFLICT, 409, "CONFLICT", "Conflict"),
        (ErrorKind.TENANT, 403, "TENANT_ERROR", "Tenant Error"),
        (ErrorKind.RATE_LIMIT, 429, "RATE_LIMITED", "Too Many Requests"),
        (ErrorKind.BUSINESS_RULE, 400, "BUSINESS_RULE_VIOLATION", "Bad Request"),
        (ErrorKind.INTERNAL, 500, "INTERNAL_ERROR", "Internal Server Error"),
    ])
    def test_kind_table(self, kind, status_code, code, label):
        assert kind.http_status == status_code
        assert kind.code == code
        assert kind.label == label
        assert kind.info is ERROR_TAXONOMY[kind]

    def test_every_kind_described(self):
        assert set(ERROR_TAXONOMY) == set(ErrorKind)

    def test_codes_are_unique(self):
        codes = [info.code for info in ERROR_TAXONOMY.values()]
        assert len(codes) == len(set(codes))

    def test_bare_403_reads_as_authorization(self):
        assert kind_for_status(403) is ErrorKind.AUTHORIZATION

    @pytest.mark.parametrize("status_code,kind", [
        (400, ErrorKind.BUSINESS_RULE),
        (401, ErrorKind.AUTHENTICATION),
        (404, ErrorKind.NOT_FOUND),
        (409, ErrorKind.CONFLICT),
        (422, ErrorKind.VALIDATION),
        (429, ErrorKind.RATE_LIMIT),
        (500, ErrorKind.INTERNAL),
        (405, None),
        (503, None),
    ])
    def test_kind_for_status(self, status_code, kind):
        assert kind_for_status(status_code) is kind

    @pytest.mark.parametrize("status_code,label", [
        (404, "Not Found"),
        (405, "Method Not Allowed"),
        (503, "Service Unavailable"),
        (599, "Error"),
    ])
    def test_label_for_status(self, status_code, label):
        assert label_for_status(status_code) == label


class TestBusinessExceptions:
    def test_defaults_come_from_kind(self):
        exc = BusinessException()

        assert exc.status_code == 400
        assert exc.message == "Bad Request"
        assert exc.code == "BUSINESS_RULE_VIOLATION"
        assert exc.to_details() == {"code": "BUSINESS_RULE_VIOLATION"}
        assert str(exc) == "Bad Request"

    def test_status_override(self):
        exc = BusinessException("Order locked", details={"order_id": "o-1"}, status_code=423)

        assert exc.status_code == 423
        assert exc.kind is ErrorKind.BUSINESS_RULE
        assert exc.to_details() == {"code": "BUSINESS_RULE_VIOLATION", "order_id": "o-1"}

    @pytest.mark.parametrize("payload", [["row 3", "row 7"], "free text", 42])
    def test_non_mapping_details_kept_under_data(self, payload):
        exc = BusinessException("Rows rejected", details=payload)

        assert exc.details == {"data": payload}
        assert exc.to_details() == {"code": "BUSINESS_RULE_VIOLATION", "data": payload}

    def test_details_mapping_is_copied(self):
        payload = {"order_id": "o-1"}
        exc = BusinessException(details=payload)
        payload["order_id"] = "o-2"

        assert exc.details == {"order_id": "o-1"}

    def test_not_found(self):
        exc = NotFoundException("Entity", "entity-999")

        assert exc.status_code == 404
        assert exc.message == "Entity not found"
        assert exc.to_details() == {"code": "NOT_FOUND", "resource": "Entity", "id": "entity-999"}

    def test_not_found_without_id(self):
        assert NotFoundException("Entity").details == {"resource": "Entity"}

    def test_validation_for_field(self):
        exc = ValidationException.for_field("name", "Name is required", "missing")

        assert exc.status_code == 422
        assert exc.message == "Validation failed"
        assert exc.details == {"errors": [{"field": "name", "message": "Name is required", "type": "missing"}]}

    def test_unauthorized(self):
        exc = UnauthorizedException()

        assert exc.status_code == 401
        assert exc.message == "Unauthorized access"

    @pytest.mark.parametrize("exc_class,status_code,code", [
        (ForbiddenException, 403, "FORBIDDEN"),
        (ConflictException, 409, "CONFLICT"),
        (TenantException, 403, "TENANT_ERROR"),
    ])
    def test_kind_tags(self, exc_class, status_code, code):
        exc = exc_class()

        assert exc.status_code == status_code
        assert exc.code == code
        assert isinstance(exc, BusinessException)

    def test_rate_limit(self):
        exc = RateLimitException(retry_after_seconds=30)

        assert exc.status_code == 429
        assert exc.details == {"retry_after_seconds": 30}
        assert RateLimitException().details == {}
