"""Pytest fixtures for the API core.

Provides reusable test fixtures for:
- In-memory SQLite schema, created and dropped per test
- A collecting log sink capturing every structured log record
- Application and TestClient wired to that sink
- Bearer token / tenant header helpers
- Routes that fail in each way the error handlers must cope with

Usage:
    def test_health(client, log_sink):
        response = client.get("/health")
        assert response.status_code == 200
        assert log_sink.by_type("http_request")
"""

import os
import threading

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")

import pytest
from fastapi import APIRouter, HTTPException
from fastapi.testclient import TestClient

from saas_core.auth.jwt import create_access_token
from saas_core.config import Settings
from saas_core.database import engine
from saas_core.errors.exceptions import ConflictException, RateLimitException
from saas_core.main import create_app
from saas_core.models.base import Base
from saas_core.observability.logging_config import LogLevel, LogRecord, StructuredLogger

TEST_JWT_SECRET = "test-jwt-secret-key-256-bits-minimum-length-required-for-security"


class CollectingSink:
    """Log sink keeping records in memory, in write order."""

    def __init__(self):
        self.records = []
        self._lock = threading.Lock()
        self.closed = False

    def write(self, record: LogRecord) -> None:
        with self._lock:
            self.records.append(record)

    def close(self) -> None:
        self.closed = True

    def by_type(self, event_type: str):
        return [r for r in self.records if r.context.get("type") == event_type]

    def at_level(self, level: LogLevel):
        return [r for r in self.records if r.level is level]

    def for_correlation(self, correlation_id: str):
        return [r for r in self.records if r.context.get("correlation_id") == correlation_id]

    def request_logs(self, correlation_id: str):
        """Request-entry records written by the observability middleware."""
        return [r for r in self.for_correlation(correlation_id) if r.context.get("type") == "http_request"]

    def outcome_logs(self, correlation_id: str):
        """Response or error records written by the observability middleware."""
        return [r for r in self.for_correlation(correlation_id) if "response_time_ms" in r.context]


failing_router = APIRouter(prefix="/test")


@failing_router.get("/http-error")
def raise_http_error():
    raise HTTPException(status_code=404, detail="Thing missing")


@failing_router.get("/http-error-list")
def raise_http_error_list():
    raise HTTPException(status_code=400, detail=["first problem", "second problem"])


@failing_router.get("/http-error-dict")
def raise_http_error_dict():
    raise HTTPException(status_code=403, detail={"message": "Nope", "reason": "policy"})


@failing_router.get("/boom")
def raise_generic_error():
    raise RuntimeError("secret database password is hunter2")


@failing_router.get("/null")
def dereference_none():
    record = None
    return {"name": record.name}


@failing_router.get("/conflict")
def raise_conflict():
    raise ConflictException("Already there", details={"field": "name"})


@failing_router.get("/rate-limit")
def raise_rate_limit():
    raise RateLimitException(retry_after_seconds=30)


class UnprintableError(Exception):
    """Exception whose string form cannot be rendered."""

    def __str__(self):
        raise ValueError("cannot render")


@failing_router.get("/unprintable")
def raise_unprintable():
    raise UnprintableError()


@pytest.fixture
def log_sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def structured_logger(log_sink) -> StructuredLogger:
    return StructuredLogger(log_sink, level=LogLevel.DEBUG)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL="sqlite://",
        DATABASE_SYNCHRONIZE=False,
        LOG_LEVEL="debug",
        LOG_JSON=True,
        REQUEST_LOGGING_ENABLED=True,
        JWT_SECRET=TEST_JWT_SECRET,
    )


@pytest.fixture
def db_schema():
    """Create all tables before the test and drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(test_settings, log_sink, db_schema):
    application = create_app(test_settings, log_sink=log_sink)
    application.include_router(failing_router)
    return application


@pytest.fixture
def client(app):
    """TestClient that returns 500 responses instead of re-raising server errors."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(test_settings):
    """Build headers for a user acting within a tenant."""

    def _headers(tenant: str = "acme", user_id: str = "user-1", **extra) -> dict:
        token = create_access_token(user_id=user_id, tenant_slug=tenant, settings=test_settings)
        headers = {"Authorization": f"Bearer {token}", "x-tenant-slug": tenant}
        headers.update(extra)
        return headers

    return _headers
