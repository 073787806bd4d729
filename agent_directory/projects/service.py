"""Project management: org-scoped CRUD, membership, versioned snapshots."""
import logging
import uuid
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.audit.models import AuditEventType
from agent_directory.audit.service import log_event
from agent_directory.auth.models import User
from agent_directory.core.exceptions import ConflictError, NotFoundError
from agent_directory.core.tenancy import assert_project_member, assert_project_owner, require_org_project
from agent_directory.db.base import not_deleted
from agent_directory.projects.models import (
    Project,
    ProjectMember,
    ProjectMemberRole,
    ProjectStatus,
)
from agent_directory.projects.schemas import ProjectCreate, ProjectFilters, ProjectResponse, ProjectUpdate
from agent_directory.templates.models import Template
from agent_directory.versioning.models import ConfigurationType
from agent_directory.versioning.service import create_version

logger = logging.getLogger(__name__)


def project_snapshot(project: Project) -> dict[str, Any]:
    return ProjectResponse.model_validate(project).model_dump(mode="json")


async def _require_visible_template(
    db: AsyncSession, template_id: uuid.UUID, organization_id: uuid.UUID
) -> None:
    result = await db.execute(
        select(Template.id).where(
            Template.id == template_id,
            or_(Template.organization_id == organization_id, Template.is_public == True),  # noqa: E712
            not_deleted(Template),
        )
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Template", str(template_id))


async def create_project(
    db: AsyncSession,
    data: ProjectCreate,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Project:
    """Create the project, enrol the creator as OWNER, record version 1."""
    existing = await db.execute(
        select(Project.id).where(
            Project.organization_id == organization_id, Project.slug == data.slug
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"A project with slug '{data.slug}' already exists")

    if data.template_id is not None:
        await _require_visible_template(db, data.template_id, organization_id)

    project = Project(
        organization_id=organization_id,
        owner_id=user_id,
        **data.model_dump(),
    )
    db.add(project)
    await db.flush()

    db.add(ProjectMember(project_id=project.id, user_id=user_id, role=ProjectMemberRole.OWNER))
    await db.flush()

    snapshot = project_snapshot(project)
    await create_version(
        db,
        project_id=project.id,
        configuration_type=ConfigurationType.PROJECT,
        entity_id=project.id,
        content=snapshot,
        created_by=user_id,
        changes_summary="Project created",
    )
    await log_event(
        db,
        AuditEventType.CREATE,
        "project",
        "create",
        resource_id=project.id,
        description=f"Project {project.name} created",
        user_id=user_id,
        new_values=snapshot,
    )
    logger.info("Project %s created by user %s", project.id, user_id)
    return project


async def list_projects(
    db: AsyncSession, organization_id: uuid.UUID, filters: ProjectFilters
) -> list[Project]:
    q = select(Project).where(Project.organization_id == organization_id)
    if filters.status is not None:
        q = q.where(Project.status == filters.status)
    if filters.visibility is not None:
        q = q.where(Project.visibility == filters.visibility)
    if filters.owner_id is not None:
        q = q.where(Project.owner_id == filters.owner_id)
    result = await db.execute(q.order_by(Project.created_at.desc()))
    return list(result.scalars().all())


async def get_project(
    db: AsyncSession, project_id: uuid.UUID, organization_id: uuid.UUID
) -> Project:
    return await require_org_project(db, project_id, organization_id)


async def list_members(db: AsyncSession, project_id: uuid.UUID) -> list[ProjectMember]:
    result = await db.execute(
        select(ProjectMember)
        .where(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.created_at)
    )
    return list(result.scalars().all())


async def update_project(
    db: AsyncSession,
    project_id: uuid.UUID,
    data: ProjectUpdate,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Project:
    project = await require_org_project(db, project_id, organization_id)
    await assert_project_member(
        db, project, user_id, "You do not have permission to edit this project"
    )

    changes = data.model_dump(exclude_unset=True)
    if changes.get("template_id") is not None:
        await _require_visible_template(db, changes["template_id"], organization_id)

    old_values = project_snapshot(project)
    for key, value in changes.items():
        setattr(project, key, value)
    await db.flush()

    snapshot = project_snapshot(project)
    await create_version(
        db,
        project_id=project.id,
        configuration_type=ConfigurationType.PROJECT,
        entity_id=project.id,
        content=snapshot,
        created_by=user_id,
        changes_summary="Project updated",
    )
    await log_event(
        db,
        AuditEventType.UPDATE,
        "project",
        "update",
        resource_id=project.id,
        description=f"Project {project.name} updated",
        user_id=user_id,
        old_values=old_values,
        new_values=snapshot,
    )
    logger.info("Project %s updated by user %s", project.id, user_id)
    return project


async def update_status(
    db: AsyncSession,
    project_id: uuid.UUID,
    status: ProjectStatus,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Project:
    project = await require_org_project(db, project_id, organization_id)
    await assert_project_member(
        db, project, user_id, "You do not have permission to change this project's status"
    )
    previous = project.status
    project.status = status
    await db.flush()

    await log_event(
        db,
        AuditEventType.STATUS_CHANGE,
        "project",
        "change_status",
        resource_id=project.id,
        description=f"Project {project.name} status changed from {previous.value} to {status.value}",
        user_id=user_id,
        old_values={"status": previous.value},
        new_values={"status": status.value},
    )
    return project


async def archive_project(
    db: AsyncSession,
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Project:
    """Projects are archived, never removed; only the owner may do it."""
    project = await require_org_project(db, project_id, organization_id)
    assert_project_owner(project, user_id, "Only the owner can delete this project")

    old_values = project_snapshot(project)
    project.status = ProjectStatus.ARCHIVED
    await db.flush()

    await log_event(
        db,
        AuditEventType.DELETE,
        "project",
        "archive",
        resource_id=project.id,
        description=f"Project {project.name} archived",
        user_id=user_id,
        old_values=old_values,
    )
    logger.info("Project %s archived by user %s", project.id, user_id)
    return project


async def add_member(
    db: AsyncSession,
    project_id: uuid.UUID,
    member_user_id: uuid.UUID,
    role: ProjectMemberRole,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> ProjectMember:
    project = await require_org_project(db, project_id, organization_id)
    assert_project_owner(project, user_id, "Only the owner can add members")

    result = await db.execute(
        select(User.id).where(User.id == member_user_id, User.organization_id == organization_id)
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError("User", str(member_user_id))

    result = await db.execute(
        select(ProjectMember.id).where(
            ProjectMember.project_id == project.id, ProjectMember.user_id == member_user_id
        )
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError("User is already a member of this project")

    member = ProjectMember(project_id=project.id, user_id=member_user_id, role=role)
    db.add(member)
    await db.flush()

    await log_event(
        db,
        AuditEventType.CREATE,
        "project_member",
        "add_member",
        resource_id=member.id,
        description=f"Member added to project {project.name}",
        user_id=user_id,
        new_values={"project_id": project.id, "user_id": member_user_id, "role": role.value},
    )
    return member


async def remove_member(
    db: AsyncSession,
    project_id: uuid.UUID,
    member_user_id: uuid.UUID,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> None:
    project = await require_org_project(db, project_id, organization_id)
    assert_project_owner(project, user_id, "Only the owner can remove members")

    result = await db.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project.id, ProjectMember.user_id == member_user_id
        )
    )
    member = result.scalar_one_or_none()
    if member is None:
        raise NotFoundError("ProjectMember", str(member_user_id))

    old_values = {"project_id": project.id, "user_id": member.user_id, "role": member.role.value}
    await db.delete(member)
    await db.flush()

    await log_event(
        db,
        AuditEventType.DELETE,
        "project_member",
        "remove_member",
        resource_id=member.id,
        description=f"Member removed from project {project.name}",
        user_id=user_id,
        old_values=old_values,
    )
