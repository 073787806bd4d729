import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from agent_directory.core.schemas import PartialUpdate
from agent_directory.projects.models import ProjectMemberRole, ProjectStatus, ProjectVisibility


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=128, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str | None = None
    long_description: str | None = None
    status: ProjectStatus = ProjectStatus.DEVELOPMENT
    visibility: ProjectVisibility = ProjectVisibility.PRIVATE
    template_id: uuid.UUID | None = None
    repository_url: str | None = None
    repository_branch: str | None = None


class ProjectUpdate(PartialUpdate):
    non_nullable = ("name", "visibility")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    long_description: str | None = None
    visibility: ProjectVisibility | None = None
    template_id: uuid.UUID | None = None
    repository_url: str | None = None
    repository_branch: str | None = None


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus


class ProjectFilters(BaseModel):
    status: ProjectStatus | None = None
    visibility: ProjectVisibility | None = None
    owner_id: uuid.UUID | None = None


class MemberAdd(BaseModel):
    user_id: uuid.UUID
    role: ProjectMemberRole = ProjectMemberRole.VIEWER


class MemberResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    project_id: uuid.UUID
    user_id: uuid.UUID
    role: ProjectMemberRole
    created_at: datetime


class ProjectResponse(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    organization_id: uuid.UUID
    owner_id: uuid.UUID
    template_id: uuid.UUID | None
    name: str
    slug: str
    description: str | None
    long_description: str | None
    status: ProjectStatus
    visibility: ProjectVisibility
    repository_url: str | None
    repository_branch: str | None
    created_at: datetime
    updated_at: datetime


class ProjectDetail(ProjectResponse):
    members: list[MemberResponse] = []
