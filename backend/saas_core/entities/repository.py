"""Tenant-scoped entity repository.

Every query filters by tenant_id and skips soft-deleted rows. A row that
belongs to another tenant is reported exactly like a missing row (404), so
callers cannot probe other tenants' data.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..errors.exceptions import ConflictException, NotFoundException
from ..models.entity import Entity
from ..observability.log_method import log_method
from ..observability.logging_config import StructuredLogger
from .schemas import EntityCreate, EntityUpdate

RESOURCE_NAME = "Entity"


class EntityRepository:
    """CRUD operations on Entity for one tenant."""

    def __init__(self, session: Session, tenant_id: str, logger: StructuredLogger):
        self.session = session
        self.tenant_id = tenant_id
        self.logger = logger

    def _scoped(self):
        return select(Entity).where(
            Entity.tenant_id == self.tenant_id,
            Entity.is_deleted.is_(False),
        )

    def _find_by_name(self, name: str) -> Optional[Entity]:
        stmt = self._scoped().where(Entity.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def _ensure_name_available(self, name: str, exclude_id: Optional[str] = None) -> None:
        existing = self._find_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise ConflictException(
                f"Entity with name '{name}' already exists",
                details={"resource": RESOURCE_NAME, "field": "name", "value": name},
            )

    @log_method("List entities")
    def list(self, page: int = 1, per_page: int = 50, q: Optional[str] = None) -> Tuple[List[Entity], int]:
        stmt = self._scoped()
        if q:
            stmt = stmt.where(Entity.name.ilike(f"%{q}%"))

        total = self.session.execute(select(func.count()).select_from(stmt.subquery())).scalar()

        offset = (page - 1) * per_page
        stmt = stmt.order_by(Entity.name).offset(offset).limit(per_page)
        return list(self.session.execute(stmt).scalars().all()), total

    def find_by_id(self, entity_id: str) -> Optional[Entity]:
        stmt = self._scoped().where(Entity.id == entity_id)
        return self.session.execute(stmt).scalar_one_or_none()

    @log_method("Get entity", include_args=True)
    def get_or_404(self, entity_id: str) -> Entity:
        """Entity by ID within the tenant.

        Raises:
            NotFoundException: If missing, soft-deleted, or owned by another tenant
        """
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise NotFoundException(RESOURCE_NAME, entity_id)
        return entity

    @log_method("Create entity", include_args=True)
    def create(self, data: EntityCreate, created_by: Optional[str] = None) -> Entity:
        self._ensure_name_available(data.name)

        entity = Entity(
            tenant_id=self.tenant_id,
            name=data.name,
            description=data.description,
            is_active=data.is_active,
            created_by=created_by,
        )
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)

        self.logger.log("Entity created", {"entity_id": entity.id, "tenant_id": self.tenant_id})
        return entity

    @log_method("Update entity", include_args=True)
    def update(self, entity_id: str, data: EntityUpdate) -> Entity:
        entity = self.get_or_404(entity_id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") and changes["name"] != entity.name:
            self._ensure_name_available(changes["name"], exclude_id=entity.id)

        for field, value in changes.items():
            setattr(entity, field, value)

        self.session.commit()
        self.session.refresh(entity)
        return entity

    @log_method("Delete entity", include_args=True)
    def soft_delete(self, entity_id: str) -> None:
        entity = self.get_or_404(entity_id)
        entity.is_deleted = True
        self.session.commit()

        self.logger.log("Entity deleted", {"entity_id": entity_id, "tenant_id": self.tenant_id})
