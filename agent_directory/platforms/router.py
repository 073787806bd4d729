import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from agent_directory.core.dependencies import DbSession, Principal, require_permissions
from agent_directory.platforms import service as platform_service
from agent_directory.platforms.schemas import (
    PlatformCreate,
    PlatformFilters,
    PlatformResponse,
    PlatformUpdate,
)

router = APIRouter(prefix="/platforms", tags=["platforms"])


@router.post("", response_model=PlatformResponse, status_code=201)
async def create_platform(
    body: PlatformCreate,
    user: Annotated[Principal, Depends(require_permissions("platforms.create"))],
    db: DbSession,
):
    platform = await platform_service.create_platform(
        db, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return platform


@router.get("", response_model=list[PlatformResponse])
async def list_platforms(
    filters: Annotated[PlatformFilters, Query()],
    user: Annotated[Principal, Depends(require_permissions("platforms.read"))],
    db: DbSession,
):
    return await platform_service.list_platforms(db, user.organization_id, filters)


@router.get("/{platform_id}", response_model=PlatformResponse)
async def get_platform(
    platform_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("platforms.read"))],
    db: DbSession,
):
    return await platform_service.get_platform(db, platform_id, user.organization_id)


@router.patch("/{platform_id}", response_model=PlatformResponse)
async def update_platform(
    platform_id: uuid.UUID,
    body: PlatformUpdate,
    user: Annotated[Principal, Depends(require_permissions("platforms.update"))],
    db: DbSession,
):
    platform = await platform_service.update_platform(
        db, platform_id, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return platform


@router.delete("/{platform_id}", status_code=204)
async def delete_platform(
    platform_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("platforms.delete"))],
    db: DbSession,
):
    await platform_service.delete_platform(
        db, platform_id, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
