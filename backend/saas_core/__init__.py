"""SaaS Core - multi-tenant API core with request observability and normalized errors."""

__version__ = "0.1.0"
