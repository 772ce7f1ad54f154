"""Entity management API endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..observability.logging_config import StructuredLogger
from ..tenancy.dependencies import require_tenant, require_user
from .repository import EntityRepository
from .schemas import EntityCreate, EntityListResponse, EntityResponse, EntityUpdate

router = APIRouter(prefix="/entities", tags=["entities"])


def get_structured_logger(request: Request) -> StructuredLogger:
    """Application-wide StructuredLogger created by the app factory."""
    return request.app.state.logger


def get_repository(
    db: Session = Depends(get_db),
    tenant: str = Depends(require_tenant),
    logger: StructuredLogger = Depends(get_structured_logger),
) -> EntityRepository:
    return EntityRepository(db, tenant, logger)


# ============================================================================
# Entity CRUD Endpoints
# ============================================================================

@router.post("", response_model=EntityResponse, status_code=status.HTTP_201_CREATED)
def create_entity(
    entity_data: EntityCreate,
    repository: EntityRepository = Depends(get_repository),
    user_id: str = Depends(require_user),
):
    """
    Create a new entity in the current tenant.

    Raises:
        422: If the payload fails validation
        409: If an entity with the same name already exists
    """
    entity = repository.create(entity_data, created_by=user_id)
    return EntityResponse.model_validate(entity.to_dict())


@router.get("", response_model=EntityListResponse)
def list_entities(
    q: Optional[str] = Query(None, description="Search query for name"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(50, ge=1, le=100, description="Items per page"),
    repository: EntityRepository = Depends(get_repository),
):
    """
    List entities with pagination and name search.
    """
    entities, total = repository.list(page=page, per_page=per_page, q=q)
    total_pages = (total + per_page - 1) // per_page if total > 0 else 0

    return EntityListResponse(
        items=[EntityResponse.model_validate(entity.to_dict()) for entity in entities],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )


@router.get("/{entity_id}", response_model=EntityResponse)
def get_entity(
    entity_id: str,
    repository: EntityRepository = Depends(get_repository),
):
    """
    Get a single entity by ID.

    Raises:
        404: If the entity does not exist or belongs to another tenant
    """
    entity = repository.get_or_404(entity_id)
    return EntityResponse.model_validate(entity.to_dict())


@router.patch("/{entity_id}", response_model=EntityResponse)
def update_entity(
    entity_id: str,
    entity_data: EntityUpdate,
    repository: EntityRepository = Depends(get_repository),
    user_id: str = Depends(require_user),
):
    """
    Update an entity (partial update).
    """
    entity = repository.update(entity_id, entity_data)
    return EntityResponse.model_validate(entity.to_dict())


@router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entity(
    entity_id: str,
    repository: EntityRepository = Depends(get_repository),
    user_id: str = Depends(require_user),
):
    """
    Soft delete an entity.
    """
    repository.soft_delete(entity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
