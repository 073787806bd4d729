import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from agent_directory.core.schemas import PartialUpdate


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str | None = None
    description: str | None = None
    is_system: bool = False


class TagUpdate(PartialUpdate):
    non_nullable = ("name",)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    color: str | None = None
    description: str | None = None


class TagFilters(BaseModel):
    is_system: bool | None = None


class TagResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    color: str | None
    description: str | None
    is_system: bool
    created_at: datetime
    updated_at: datetime
