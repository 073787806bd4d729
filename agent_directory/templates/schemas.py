import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agent_directory.core.schemas import PartialUpdate


class TemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str | None = None
    is_public: bool = False
    base_config: dict[str, Any] = Field(default_factory=dict)
    docker_compose: str | None = None
    readme: str | None = None
    thumbnail_url: str | None = None


class TemplateUpdate(PartialUpdate):
    non_nullable = ("name", "is_public", "base_config")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = None
    is_public: bool | None = None
    base_config: dict[str, Any] | None = None
    docker_compose: str | None = None
    readme: str | None = None
    thumbnail_url: str | None = None


class TemplateFilters(BaseModel):
    category: str | None = None
    is_public: bool | None = None


class TemplateResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    organization_id: uuid.UUID
    created_by_id: uuid.UUID
    name: str
    description: str | None
    category: str | None
    is_public: bool
    base_config: dict[str, Any]
    docker_compose: str | None
    readme: str | None
    thumbnail_url: str | None
    created_at: datetime
    updated_at: datetime
