"""Database session factory and configuration.

Provides database connectivity and session management.
"""

from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings
from .models.base import Base


def _engine_kwargs(database_url: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": False,  # Set to True for SQL query logging
    }
    if database_url.startswith("sqlite"):
        # Sync endpoints run in a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise each checkout sees an empty database
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_size"] = 5
        kwargs["max_overflow"] = 10
    return kwargs


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **_engine_kwargs(database_url))


engine = build_engine(get_settings().DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def create_schema() -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints.

    Usage:
        @app.get("/entities")
        def list_entities(db: Session = Depends(get_db)):
            return db.query(Entity).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
