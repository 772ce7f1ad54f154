"""Base SQLAlchemy declarative base for all models.

Table names are the snake_case form of the class name and constraints
follow a snake_case naming convention, so ``SampleEntity.tenant_id`` maps to
``sample_entity.tenant_id`` with an index named ``ix_sample_entity_tenant_id``.
"""

import re
import uuid

from sqlalchemy import Boolean, Column, DateTime, MetaData, String, func
from sqlalchemy.orm import declarative_base, declared_attr

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """Convert CamelCase or camelCase identifiers to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


class _Base:
    @declared_attr
    def __tablename__(cls) -> str:
        return snake_case(cls.__name__)


Base = declarative_base(cls=_Base, metadata=MetaData(naming_convention=NAMING_CONVENTION))


def new_uuid() -> str:
    return str(uuid.uuid4())


class BaseEntity:
    """Columns every entity carries: UUID primary key, timestamps, soft delete flag."""
    id = Column(String(36), primary_key=True, default=new_uuid)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    is_deleted = Column(Boolean, nullable=False, default=False, server_default="0")


class TenantEntity(BaseEntity):
    """Entity owned by a tenant. Every query must filter on tenant_id."""
    tenant_id = Column(String(63), nullable=False, index=True)
