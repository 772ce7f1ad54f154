"""Sample tenant-scoped entity model"""

from sqlalchemy import Boolean, Column, Index, String, Text

from .base import Base, TenantEntity


class Entity(TenantEntity, Base):
    """Generic named entity managed through the CRUD API.

    Names are unique per tenant among live (not soft-deleted) rows; the
    repository enforces this.
    """
    __table_args__ = (
        Index("ix_entity_tenant_id_name", "tenant_id", "name"),
    )

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default="1")
    created_by = Column(String(255), nullable=True)

    def to_dict(self):
        """Convert entity to dictionary representation"""
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
