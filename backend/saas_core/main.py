"""SaaS Core - Main FastAPI Application

Multi-Tenant API core

This module creates and configures the FastAPI application, including:
- Structured logger and log sink (one per process)
- Middleware (tenant context, request observability, CORS)
- Global exception handlers producing the error envelope
- Health, readiness, metrics and entity routers
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings, logger_config
from .database import create_schema
from .entities.router import router as entities_router
from .errors.handlers import GlobalErrorNormalizer, register_exception_handlers
from .observability.logging_config import LoggingSink, LogSink, StructuredLogger, configure_logging
from .observability.middleware import RequestObservabilityMiddleware
from .observability.router import router as observability_router
from .tenancy.middleware import TenantContextMiddleware


def create_app(settings: Optional[Settings] = None, log_sink: Optional[LogSink] = None) -> FastAPI:
    """Application factory.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        log_sink: Destination for structured log records (defaults to stdlib logging)

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()
    profile = logger_config(settings)

    configure_logging(level=profile.level, json_format=profile.json_format)
    logger = StructuredLogger(
        log_sink or LoggingSink(),
        level=profile.level,
        method_logging=profile.method_logging,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler.

        - Startup: create missing tables when schema synchronization is on
        - Shutdown: flush and close the log sink
        """
        logger.log(
            f"{settings.APP_NAME} starting up",
            {"type": "application_startup", "environment": settings.ENVIRONMENT},
        )
        if settings.synchronize_schema:
            create_schema()

        yield

        logger.log(f"{settings.APP_NAME} shutting down", {"type": "application_shutdown"})
        logger.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        openapi_url=None if settings.is_production else "/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.logger = logger

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    normalizer = GlobalErrorNormalizer(logger, header_name=settings.CORRELATION_ID_HEADER)
    register_exception_handlers(app, normalizer)
    app.state.error_normalizer = normalizer

    # =========================================================================
    # MIDDLEWARE CONFIGURATION (last added runs first)
    # =========================================================================

    app.add_middleware(
        RequestObservabilityMiddleware,
        logger=logger,
        header_name=settings.CORRELATION_ID_HEADER,
        enabled=profile.request_logging,
    )

    # Tenant and user must be on request.state before the request is logged
    app.add_middleware(TenantContextMiddleware, settings=settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.CORRELATION_ID_HEADER],
    )

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    # Observability (health, ready, metrics)
    app.include_router(observability_router)

    # Entity CRUD
    app.include_router(entities_router, prefix=settings.API_PREFIX)

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        """Root endpoint - API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": None if settings.is_production else "/docs",
        }

    @app.get(settings.API_PREFIX, include_in_schema=False)
    async def api_root() -> dict[str, Any]:
        """API root endpoint."""
        return {
            "version": settings.API_PREFIX.rsplit("/", 1)[-1],
            "status": "active",
            "endpoints": {
                "entities": f"{settings.API_PREFIX}/entities",
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
            },
        }

    return app


app = create_app()


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "saas_core.main:app",
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.ENVIRONMENT == "development",
        log_level="debug" if _settings.ENVIRONMENT == "development" else "info",
    )
