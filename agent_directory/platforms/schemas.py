import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agent_directory.core.schemas import PartialUpdate


class PlatformCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    provider: str = Field(min_length=1, max_length=100)
    description: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)


class PlatformUpdate(PartialUpdate):
    non_nullable = ("name", "provider", "config")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    provider: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    config: dict[str, Any] | None = None


class PlatformFilters(BaseModel):
    provider: str | None = None


class PlatformResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    provider: str
    description: str | None
    config: dict[str, Any]
    created_at: datetime
    updated_at: datetime
