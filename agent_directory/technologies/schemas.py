import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from agent_directory.core.schemas import PartialUpdate


class TechnologyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: str = Field(min_length=1, max_length=100)
    description: str | None = None
    icon_url: str | None = None
    website_url: str | None = None


class TechnologyUpdate(PartialUpdate):
    non_nullable = ("name", "type")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    icon_url: str | None = None
    website_url: str | None = None


class TechnologyFilters(BaseModel):
    type: str | None = None


class TechnologyResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    type: str
    description: str | None
    icon_url: str | None
    website_url: str | None
    created_at: datetime
    updated_at: datetime
