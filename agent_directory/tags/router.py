import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from agent_directory.core.dependencies import DbSession, Principal, require_permissions
from agent_directory.tags import service as tag_service
from agent_directory.tags.schemas import (
    TagCreate,
    TagFilters,
    TagResponse,
    TagUpdate,
)

router = APIRouter(prefix="/tags", tags=["tags"])


@router.post("", response_model=TagResponse, status_code=201)
async def create_tag(
    body: TagCreate,
    user: Annotated[Principal, Depends(require_permissions("tags.create"))],
    db: DbSession,
):
    tag = await tag_service.create_tag(
        db, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return tag


@router.get("", response_model=list[TagResponse])
async def list_tags(
    filters: Annotated[TagFilters, Query()],
    user: Annotated[Principal, Depends(require_permissions("tags.read"))],
    db: DbSession,
):
    return await tag_service.list_tags(db, user.organization_id, filters)


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(
    tag_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("tags.read"))],
    db: DbSession,
):
    return await tag_service.get_tag(db, tag_id, user.organization_id)


@router.patch("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: uuid.UUID,
    body: TagUpdate,
    user: Annotated[Principal, Depends(require_permissions("tags.update"))],
    db: DbSession,
):
    tag = await tag_service.update_tag(
        db, tag_id, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return tag


@router.delete("/{tag_id}", status_code=204)
async def delete_tag(
    tag_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("tags.delete"))],
    db: DbSession,
):
    await tag_service.delete_tag(
        db, tag_id, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
