import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from agent_directory.core.dependencies import DbSession, Principal, require_permissions
from agent_directory.templates import service as template_service
from agent_directory.templates.schemas import (
    TemplateCreate,
    TemplateFilters,
    TemplateResponse,
    TemplateUpdate,
)

router = APIRouter(prefix="/templates", tags=["templates"])


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template(
    body: TemplateCreate,
    user: Annotated[Principal, Depends(require_permissions("templates.create"))],
    db: DbSession,
):
    template = await template_service.create_template(
        db, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return template


@router.get("", response_model=list[TemplateResponse])
async def list_templates(
    filters: Annotated[TemplateFilters, Query()],
    user: Annotated[Principal, Depends(require_permissions("templates.read"))],
    db: DbSession,
):
    return await template_service.list_templates(db, user.organization_id, filters)


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("templates.read"))],
    db: DbSession,
):
    return await template_service.get_template(db, template_id, user.organization_id)


@router.patch("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: uuid.UUID,
    body: TemplateUpdate,
    user: Annotated[Principal, Depends(require_permissions("templates.update"))],
    db: DbSession,
):
    template = await template_service.update_template(
        db, template_id, body, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return template


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("templates.delete"))],
    db: DbSession,
):
    await template_service.delete_template(
        db, template_id, user_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
