import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from agent_directory.core.dependencies import DbSession, Principal, require_permissions
from agent_directory.technologies import service as technology_service
from agent_directory.technologies.schemas import (
    TechnologyCreate,
    TechnologyFilters,
    TechnologyResponse,
    TechnologyUpdate,
)

router = APIRouter(prefix="/technologies", tags=["technologies"])


@router.post("", response_model=TechnologyResponse, status_code=201)
async def create_technology(
    body: TechnologyCreate,
    user: Annotated[Principal, Depends(require_permissions("technologies.create"))],
    db: DbSession,
):
    technology = await technology_service.create_technology(
        db, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return technology


@router.get("", response_model=list[TechnologyResponse])
async def list_technologies(
    filters: Annotated[TechnologyFilters, Query()],
    user: Annotated[Principal, Depends(require_permissions("technologies.read"))],
    db: DbSession,
):
    return await technology_service.list_technologies(db, user.organization_id, filters)


@router.get("/{technology_id}", response_model=TechnologyResponse)
async def get_technology(
    technology_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("technologies.read"))],
    db: DbSession,
):
    return await technology_service.get_technology(db, technology_id, user.organization_id)


@router.patch("/{technology_id}", response_model=TechnologyResponse)
async def update_technology(
    technology_id: uuid.UUID,
    body: TechnologyUpdate,
    user: Annotated[Principal, Depends(require_permissions("technologies.update"))],
    db: DbSession,
):
    technology = await technology_service.update_technology(
        db, technology_id, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return technology


@router.delete("/{technology_id}", status_code=204)
async def delete_technology(
    technology_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("technologies.delete"))],
    db: DbSession,
):
    await technology_service.delete_technology(
        db, technology_id, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
