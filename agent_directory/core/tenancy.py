import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.agents.models import Agent
from agent_directory.core.exceptions import ForbiddenError, NotFoundError
from agent_directory.db.base import not_deleted
from agent_directory.projects.models import Project, ProjectMember


def assert_project_owner(project: Project, user_id: uuid.UUID, message: str) -> None:
    if project.owner_id != user_id:
        raise ForbiddenError(message)


async def is_project_member(db: AsyncSession, project: Project, user_id: uuid.UUID) -> bool:
    if project.owner_id == user_id:
        return True
    result = await db.execute(
        select(ProjectMember.id).where(
            ProjectMember.project_id == project.id,
            ProjectMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def assert_project_member(
    db: AsyncSession, project: Project, user_id: uuid.UUID, message: str
) -> None:
    if not await is_project_member(db, project, user_id):
        raise ForbiddenError(message)


async def require_org_project(
    db: AsyncSession, project_id: uuid.UUID, organization_id: uuid.UUID
) -> Project:
    """Projects of other organizations are indistinguishable from missing ones."""
    result = await db.execute(
        select(Project).where(
            Project.id == project_id,
            Project.organization_id == organization_id,
        )
    )
    project = result.scalar_one_or_none()
    if project is None:
        raise NotFoundError("Project", str(project_id))
    return project


async def require_org_agent(
    db: AsyncSession, agent_id: uuid.UUID, organization_id: uuid.UUID
) -> tuple[Agent, Project]:
    result = await db.execute(
        select(Agent, Project)
        .join(Project, Project.id == Agent.project_id)
        .where(
            Agent.id == agent_id,
            Project.organization_id == organization_id,
            not_deleted(Agent),
        )
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Agent", str(agent_id))
    agent, project = row
    return agent, project
