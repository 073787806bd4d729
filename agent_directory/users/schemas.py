import uuid

from pydantic import BaseModel, Field

from agent_directory.auth.schemas import UserResponse


class UserUpdate(BaseModel):
    first_name: str | None = Field(default=None, max_length=128)
    last_name: str | None = Field(default=None, max_length=128)
    username: str | None = Field(default=None, max_length=128)
    avatar_url: str | None = None


class RoleAssign(BaseModel):
    role_id: uuid.UUID


class RoleSummary(BaseModel):
    model_config = {"from_attributes": True}
    id: uuid.UUID
    name: str
    description: str | None


class UserDetail(UserResponse):
    roles: list[RoleSummary] = []
