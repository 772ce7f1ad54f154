from .base import Base, BaseEntity, TenantEntity, snake_case
from .entity import Entity

__all__ = ["Base", "BaseEntity", "TenantEntity", "Entity", "snake_case"]
