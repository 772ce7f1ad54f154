"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Production deployments MUST set JWT_SECRET.

    Environment Variables:
        ENVIRONMENT: development | test | production
        DATABASE_URL: SQLAlchemy connection string
        LOG_LEVEL: Overrides the environment-derived log level
        LOG_JSON: Emit JSON log lines (default True)
        CORRELATION_ID_HEADER: Header carrying the correlation ID
        TENANT_HEADER: Header carrying the tenant slug
        JWT_SECRET: Bearer token signing key
    """

    # Application
    APP_NAME: str = "SaaS Core API"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite:///./saas_core.db"
    DATABASE_SYNCHRONIZE: Optional[bool] = None

    # Logging
    LOG_LEVEL: Optional[str] = None
    LOG_JSON: bool = True
    REQUEST_LOGGING_ENABLED: Optional[bool] = None

    # Request context
    CORRELATION_ID_HEADER: str = "x-correlation-id"
    TENANT_HEADER: str = "x-tenant-slug"

    # Security
    JWT_SECRET: str = "dev-jwt-secret-CHANGE-IN-PRODUCTION"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_MINUTES: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def synchronize_schema(self) -> bool:
        """Create tables at startup unless told otherwise (never by default in production)."""
        if self.DATABASE_SYNCHRONIZE is not None:
            return self.DATABASE_SYNCHRONIZE
        return not self.is_production


@dataclass(frozen=True)
class LoggerConfig:
    """Logging profile derived from the deployment environment."""
    level: str
    json_format: bool
    request_logging: bool
    method_logging: bool


def logger_config(settings: Settings) -> LoggerConfig:
    """Derive the logging profile for an environment.

    test -> error, development -> debug, anything else -> warn.
    LOG_LEVEL and REQUEST_LOGGING_ENABLED override the derived values.
    """
    environment = settings.ENVIRONMENT
    is_development = environment == "development"
    is_test = environment == "test"

    if settings.LOG_LEVEL:
        level = settings.LOG_LEVEL.lower()
    elif is_test:
        level = "error"
    elif is_development:
        level = "debug"
    else:
        level = "warn"

    request_logging = settings.REQUEST_LOGGING_ENABLED
    if request_logging is None:
        request_logging = not is_test

    return LoggerConfig(
        level=level,
        json_format=settings.LOG_JSON,
        request_logging=request_logging,
        method_logging=is_development,
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
