import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from agent_directory.core.dependencies import DbSession, Principal, require_permissions
from agent_directory.projects import service as project_service
from agent_directory.projects.schemas import (
    MemberAdd,
    MemberResponse,
    ProjectCreate,
    ProjectDetail,
    ProjectFilters,
    ProjectResponse,
    ProjectStatusUpdate,
    ProjectUpdate,
)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    body: ProjectCreate,
    user: Annotated[Principal, Depends(require_permissions("projects.create"))],
    db: DbSession,
):
    project = await project_service.create_project(
        db, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return project


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    filters: Annotated[ProjectFilters, Query()],
    user: Annotated[Principal, Depends(require_permissions("projects.read"))],
    db: DbSession,
):
    return await project_service.list_projects(db, user.organization_id, filters)


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(
    project_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("projects.read"))],
    db: DbSession,
):
    project = await project_service.get_project(db, project_id, user.organization_id)
    members = await project_service.list_members(db, project.id)
    return ProjectDetail(
        **ProjectResponse.model_validate(project).model_dump(),
        members=[MemberResponse.model_validate(m) for m in members],
    )


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    user: Annotated[Principal, Depends(require_permissions("projects.update"))],
    db: DbSession,
):
    project = await project_service.update_project(
        db, project_id, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return project


@router.patch("/{project_id}/status", response_model=ProjectResponse)
async def update_project_status(
    project_id: uuid.UUID,
    body: ProjectStatusUpdate,
    user: Annotated[Principal, Depends(require_permissions("projects.update"))],
    db: DbSession,
):
    project = await project_service.update_status(
        db, project_id, body.status, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return project


@router.delete("/{project_id}", response_model=ProjectResponse)
async def archive_project(
    project_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("projects.delete"))],
    db: DbSession,
):
    project = await project_service.archive_project(
        db, project_id, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return project


@router.post("/{project_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    project_id: uuid.UUID,
    body: MemberAdd,
    user: Annotated[Principal, Depends(require_permissions("projects.manage_members"))],
    db: DbSession,
):
    member = await project_service.add_member(
        db,
        project_id,
        body.user_id,
        body.role,
        user_id=user.id,
        organization_id=user.organization_id,
    )
    await db.commit()
    return member


@router.delete("/{project_id}/members/{member_user_id}", status_code=204)
async def remove_member(
    project_id: uuid.UUID,
    member_user_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("projects.manage_members"))],
    db: DbSession,
):
    await project_service.remove_member(
        db, project_id, member_user_id, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
