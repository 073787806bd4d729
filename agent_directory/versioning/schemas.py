import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from agent_directory.versioning.models import ConfigurationType


class VersionResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    project_id: uuid.UUID
    configuration_type: ConfigurationType
    entity_id: uuid.UUID
    version: int
    content: Any
    diff: str | None
    changes_summary: str | None
    created_by: uuid.UUID
    created_at: datetime


class VersionComparisonResponse(BaseModel):
    model_config = {"from_attributes": True}
    version1: VersionResponse
    version2: VersionResponse
    diff: str
