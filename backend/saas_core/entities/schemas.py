"""Pydantic schemas for entity management"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class EntityCreate(BaseModel):
    """Schema for creating a new entity"""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    is_active: bool = True

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is not empty after stripping whitespace"""
        if not v.strip():
            raise ValueError("Entity name cannot be empty")
        return v.strip()


class EntityUpdate(BaseModel):
    """Schema for updating an entity (all fields optional).

    Omitted fields are left alone. An explicit null clears description;
    name and is_active cannot be cleared.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        """Validate name is present and not empty after stripping whitespace"""
        if v is None:
            raise ValueError("Entity name cannot be null")
        if not v.strip():
            raise ValueError("Entity name cannot be empty")
        return v.strip()

    @field_validator('is_active')
    @classmethod
    def validate_is_active(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("is_active cannot be null")
        return v


class EntityResponse(BaseModel):
    """Schema for entity response"""
    id: str
    tenant_id: str
    name: str
    description: Optional[str] = None
    is_active: bool
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True


class EntityListResponse(BaseModel):
    """Schema for paginated entity list response"""
    items: List[EntityResponse]
    total: int
    page: int
    per_page: int
    total_pages: int
