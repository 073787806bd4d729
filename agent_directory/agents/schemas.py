import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agent_directory.core.pagination import PageMeta, PageParams
from agent_directory.core.schemas import PartialUpdate


class AgentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True


class AgentUpdate(PartialUpdate):
    non_nullable = ("name", "config", "is_active")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    config: dict[str, Any] | None = None
    is_active: bool | None = None


class AgentConfigUpdate(BaseModel):
    """Keys here are merged over the stored config, not replacing it."""
    config: dict[str, Any]


class AgentClone(BaseModel):
    new_name: str = Field(min_length=1, max_length=255)
    target_project_id: uuid.UUID


class AgentFilters(PageParams):
    project_id: uuid.UUID | None = None
    is_active: bool | None = None
    search: str | None = None


class AgentResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    description: str | None
    config: dict[str, Any]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AgentPage(BaseModel):
    items: list[AgentResponse]
    meta: PageMeta
