import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from agent_directory.audit.models import AuditEventType
from agent_directory.core.pagination import PageMeta, PageParams


class AuditLogFilters(PageParams):
    event_type: AuditEventType | None = None
    resource: str | None = None
    user_id: uuid.UUID | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class AuditLogResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    event_type: AuditEventType
    resource: str
    resource_id: str | None
    action: str
    description: str | None
    user_id: uuid.UUID | None
    ip_address: str | None
    user_agent: str | None
    old_values: Any = None
    new_values: Any = None
    metadata: dict | None = Field(default=None, validation_alias="metadata_")
    created_at: datetime


class AuditLogPage(BaseModel):
    items: list[AuditLogResponse]
    meta: PageMeta
