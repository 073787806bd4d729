"""Agent management.

Agents belong to a project. Every change to an agent's definition is recorded
as a new AGENT configuration version in that project, and every mutation is
audited in the same transaction. Deletes are soft: `deleted_at` is set and the
row disappears from all reads.
"""
import logging
import uuid
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.agents.models import Agent
from agent_directory.agents.schemas import AgentCreate, AgentFilters, AgentResponse, AgentUpdate
from agent_directory.audit.models import AuditEventType
from agent_directory.audit.service import log_event
from agent_directory.core.pagination import PageMeta, page_meta
from agent_directory.core.tenancy import (
    assert_project_member,
    assert_project_owner,
    require_org_agent,
    require_org_project,
)
from agent_directory.db.base import not_deleted
from agent_directory.projects.models import Project
from agent_directory.versioning.models import ConfigurationType, ConfigurationVersion
from agent_directory.versioning.service import create_version, get_version_history

logger = logging.getLogger(__name__)


def agent_snapshot(agent: Agent) -> dict[str, Any]:
    return AgentResponse.model_validate(agent).model_dump(mode="json")


async def create_agent(
    db: AsyncSession,
    project_id: uuid.UUID,
    data: AgentCreate,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Agent:
    project = await require_org_project(db, project_id, organization_id)
    await assert_project_member(
        db, project, user_id, "You do not have permission to create agents in this project"
    )

    agent = Agent(
        project_id=project.id,
        name=data.name,
        description=data.description,
        config=dict(data.config),
        is_active=data.is_active,
    )
    db.add(agent)
    await db.flush()

    snapshot = agent_snapshot(agent)
    await create_version(
        db,
        project_id=project.id,
        configuration_type=ConfigurationType.AGENT,
        entity_id=agent.id,
        content=snapshot,
        created_by=user_id,
        changes_summary="Agent created",
    )
    await log_event(
        db,
        AuditEventType.CREATE,
        "agent",
        "create",
        resource_id=agent.id,
        description=f"Agent {agent.name} created in project {project.name}",
        user_id=user_id,
        new_values=snapshot,
    )
    logger.info("Agent %s created in project %s by user %s", agent.id, project.id, user_id)
    return agent


def _filtered(q, organization_id: uuid.UUID, filters: AgentFilters):
    q = q.join(Project, Project.id == Agent.project_id).where(
        Project.organization_id == organization_id,
        not_deleted(Agent),
    )
    if filters.project_id is not None:
        q = q.where(Agent.project_id == filters.project_id)
    if filters.is_active is not None:
        q = q.where(Agent.is_active == filters.is_active)
    if filters.search:
        pattern = f"%{filters.search}%"
        q = q.where(or_(Agent.name.ilike(pattern), Agent.description.ilike(pattern)))
    return q


async def list_agents(
    db: AsyncSession, organization_id: uuid.UUID, filters: AgentFilters
) -> tuple[list[Agent], PageMeta]:
    total_result = await db.execute(
        _filtered(select(func.count(Agent.id)), organization_id, filters)
    )
    total = int(total_result.scalar_one())

    result = await db.execute(
        _filtered(select(Agent), organization_id, filters)
        .order_by(Agent.created_at.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    return list(result.scalars().all()), page_meta(total, filters)


async def list_agents_for_project(
    db: AsyncSession, project_id: uuid.UUID, organization_id: uuid.UUID
) -> list[Agent]:
    project = await require_org_project(db, project_id, organization_id)
    result = await db.execute(
        select(Agent)
        .where(Agent.project_id == project.id, not_deleted(Agent))
        .order_by(Agent.created_at.desc())
    )
    return list(result.scalars().all())


async def get_agent(
    db: AsyncSession, agent_id: uuid.UUID, organization_id: uuid.UUID
) -> Agent:
    agent, _ = await require_org_agent(db, agent_id, organization_id)
    return agent


async def update_agent(
    db: AsyncSession,
    agent_id: uuid.UUID,
    data: AgentUpdate,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Agent:
    agent, project = await require_org_agent(db, agent_id, organization_id)
    await assert_project_member(
        db, project, user_id, "You do not have permission to modify this agent"
    )

    old_values = agent_snapshot(agent)
    changes = data.model_dump(exclude_unset=True)
    config = changes.pop("config", None)
    for key, value in changes.items():
        setattr(agent, key, value)
    if config is not None:
        agent.config = {**agent.config, **config}
    await db.flush()

    snapshot = agent_snapshot(agent)
    await create_version(
        db,
        project_id=agent.project_id,
        configuration_type=ConfigurationType.AGENT,
        entity_id=agent.id,
        content=snapshot,
        created_by=user_id,
        changes_summary="Agent updated",
    )
    await log_event(
        db,
        AuditEventType.UPDATE,
        "agent",
        "update",
        resource_id=agent.id,
        description=f"Agent {agent.name} updated",
        user_id=user_id,
        old_values=old_values,
        new_values=snapshot,
    )
    logger.info("Agent %s updated by user %s", agent.id, user_id)
    return agent


async def toggle_active(
    db: AsyncSession, agent_id: uuid.UUID, user_id: uuid.UUID, organization_id: uuid.UUID
) -> Agent:
    agent, project = await require_org_agent(db, agent_id, organization_id)
    await assert_project_member(
        db, project, user_id, "You do not have permission to modify this agent"
    )

    previous = agent.is_active
    agent.is_active = not previous
    await db.flush()

    await log_event(
        db,
        AuditEventType.STATUS_CHANGE,
        "agent",
        "activate" if agent.is_active else "deactivate",
        resource_id=agent.id,
        description=f"Agent {agent.name} {'activated' if agent.is_active else 'deactivated'}",
        user_id=user_id,
        old_values={"is_active": previous},
        new_values={"is_active": agent.is_active},
    )
    logger.info(
        "Agent %s %s by user %s",
        agent.id, "activated" if agent.is_active else "deactivated", user_id,
    )
    return agent


async def delete_agent(
    db: AsyncSession, agent_id: uuid.UUID, user_id: uuid.UUID, organization_id: uuid.UUID
) -> None:
    agent, project = await require_org_agent(db, agent_id, organization_id)
    assert_project_owner(project, user_id, "Only the project owner can delete agents")

    old_values = agent_snapshot(agent)
    agent.soft_delete()
    await db.flush()

    await log_event(
        db,
        AuditEventType.DELETE,
        "agent",
        "delete",
        resource_id=agent.id,
        description=f"Agent {agent.name} deleted",
        user_id=user_id,
        old_values=old_values,
    )
    logger.info("Agent %s deleted by user %s", agent.id, user_id)


async def update_config(
    db: AsyncSession,
    agent_id: uuid.UUID,
    config: dict[str, Any],
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Agent:
    """Shallow-merge `config` over the stored config and version the result."""
    agent, project = await require_org_agent(db, agent_id, organization_id)
    await assert_project_member(
        db, project, user_id, "You do not have permission to modify this agent"
    )

    old_config = dict(agent.config)
    merged = {**old_config, **config}
    agent.config = merged
    await db.flush()

    await create_version(
        db,
        project_id=agent.project_id,
        configuration_type=ConfigurationType.AGENT,
        entity_id=agent.id,
        content={"config": merged},
        created_by=user_id,
        changes_summary="Agent configuration updated",
    )
    await log_event(
        db,
        AuditEventType.UPDATE,
        "agent",
        "update_config",
        resource_id=agent.id,
        description=f"Agent {agent.name} configuration updated",
        user_id=user_id,
        old_values={"config": old_config},
        new_values={"config": merged},
    )
    logger.info("Agent %s config updated by user %s", agent.id, user_id)
    return agent


async def get_agent_versions(
    db: AsyncSession, agent_id: uuid.UUID, organization_id: uuid.UUID
) -> list[ConfigurationVersion]:
    agent, _ = await require_org_agent(db, agent_id, organization_id)
    return await get_version_history(db, agent.project_id, entity_id=agent.id)


async def clone_agent(
    db: AsyncSession,
    agent_id: uuid.UUID,
    new_name: str,
    target_project_id: uuid.UUID,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Agent:
    """Copy an agent's config into another project. Clones start inactive."""
    source, _ = await require_org_agent(db, agent_id, organization_id)
    clone = await create_agent(
        db,
        target_project_id,
        AgentCreate(
            name=new_name,
            description=f"Cloned from: {source.name}",
            config=dict(source.config),
            is_active=False,
        ),
        user_id,
        organization_id,
    )
    logger.info(
        "Agent %s cloned to %s in project %s by user %s",
        source.id, clone.id, target_project_id, user_id,
    )
    return clone
