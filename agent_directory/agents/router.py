import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from agent_directory.agents import service as agent_service
from agent_directory.agents.schemas import (
    AgentClone,
    AgentConfigUpdate,
    AgentCreate,
    AgentFilters,
    AgentPage,
    AgentResponse,
    AgentUpdate,
)
from agent_directory.core.dependencies import DbSession, Principal, require_permissions
from agent_directory.versioning.schemas import VersionResponse

router = APIRouter(prefix="/agents", tags=["agents"])


@router.post("/project/{project_id}", response_model=AgentResponse, status_code=201)
async def create_agent(
    project_id: uuid.UUID,
    body: AgentCreate,
    user: Annotated[Principal, Depends(require_permissions("agents.create"))],
    db: DbSession,
):
    agent = await agent_service.create_agent(
        db, project_id, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return agent


@router.get("", response_model=AgentPage)
async def list_agents(
    filters: Annotated[AgentFilters, Query()],
    user: Annotated[Principal, Depends(require_permissions("agents.read"))],
    db: DbSession,
):
    items, meta = await agent_service.list_agents(db, user.organization_id, filters)
    return AgentPage(items=[AgentResponse.model_validate(a) for a in items], meta=meta)


@router.get("/project/{project_id}", response_model=list[AgentResponse])
async def list_project_agents(
    project_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("agents.read"))],
    db: DbSession,
):
    return await agent_service.list_agents_for_project(db, project_id, user.organization_id)


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(
    agent_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("agents.read"))],
    db: DbSession,
):
    return await agent_service.get_agent(db, agent_id, user.organization_id)


@router.patch("/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: uuid.UUID,
    body: AgentUpdate,
    user: Annotated[Principal, Depends(require_permissions("agents.update"))],
    db: DbSession,
):
    agent = await agent_service.update_agent(
        db, agent_id, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return agent


@router.patch("/{agent_id}/toggle-active", response_model=AgentResponse)
async def toggle_agent_active(
    agent_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("agents.update"))],
    db: DbSession,
):
    agent = await agent_service.toggle_active(
        db, agent_id, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return agent


@router.patch("/{agent_id}/config", response_model=AgentResponse)
async def update_agent_config(
    agent_id: uuid.UUID,
    body: AgentConfigUpdate,
    user: Annotated[Principal, Depends(require_permissions("agents.update"))],
    db: DbSession,
):
    agent = await agent_service.update_config(
        db, agent_id, body.config, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return agent


@router.delete("/{agent_id}", status_code=204)
async def delete_agent(
    agent_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("agents.delete"))],
    db: DbSession,
):
    await agent_service.delete_agent(
        db, agent_id, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()


@router.get("/{agent_id}/versions", response_model=list[VersionResponse])
async def list_agent_versions(
    agent_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("agents.read"))],
    db: DbSession,
):
    return await agent_service.get_agent_versions(db, agent_id, user.organization_id)


@router.post("/{agent_id}/clone", response_model=AgentResponse, status_code=201)
async def clone_agent(
    agent_id: uuid.UUID,
    body: AgentClone,
    user: Annotated[Principal, Depends(require_permissions("agents.create"))],
    db: DbSession,
):
    agent = await agent_service.clone_agent(
        db,
        agent_id,
        body.new_name,
        body.target_project_id,
        user_id=user.id,
        organization_id=user.organization_id,
    )
    await db.commit()
    return agent
