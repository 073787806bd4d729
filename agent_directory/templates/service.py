import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.audit.models import AuditEventType
from agent_directory.audit.service import log_event
from agent_directory.core.exceptions import ForbiddenError, NotFoundError
from agent_directory.db.base import not_deleted
from agent_directory.templates.models import Template
from agent_directory.templates.schemas import (
    TemplateCreate,
    TemplateFilters,
    TemplateResponse,
    TemplateUpdate,
)

logger = logging.getLogger(__name__)


async def create_template(
    db: AsyncSession, data: TemplateCreate, user_id: uuid.UUID, organization_id: uuid.UUID
) -> Template:
    template = Template(organization_id=organization_id, created_by_id=user_id, **data.model_dump())
    db.add(template)
    await db.flush()

    await log_event(
        db,
        AuditEventType.CREATE,
        "template",
        "create",
        resource_id=template.id,
        description=f"Template {template.name} created",
        user_id=user_id,
        new_values=TemplateResponse.model_validate(template),
    )
    logger.info("Template %s created by user %s", template.id, user_id)
    return template


async def list_templates(
    db: AsyncSession, organization_id: uuid.UUID, filters: TemplateFilters
) -> list[Template]:
    q = select(Template).where(
        or_(Template.organization_id == organization_id, Template.is_public == True),  # noqa: E712
        not_deleted(Template),
    )
    if filters.category is not None:
        q = q.where(Template.category == filters.category)
    if filters.is_public is not None:
        q = q.where(Template.is_public == filters.is_public)
    result = await db.execute(q.order_by(Template.created_at.desc()))
    return list(result.scalars().all())


async def get_template(
    db: AsyncSession, template_id: uuid.UUID, organization_id: uuid.UUID
) -> Template:
    result = await db.execute(
        select(Template).where(
            Template.id == template_id,
            or_(Template.organization_id == organization_id, Template.is_public == True),  # noqa: E712
            not_deleted(Template),
        )
    )
    template = result.scalar_one_or_none()
    if template is None:
        raise NotFoundError("Template", str(template_id))
    return template


async def _require_own_template(
    db: AsyncSession, template_id: uuid.UUID, user_id: uuid.UUID, organization_id: uuid.UUID, verb: str
) -> Template:
    # Public templates of other organizations are readable but never writable
    result = await db.execute(
        select(Template).where(
            Template.id == template_id,
            Template.organization_id == organization_id,
            not_deleted(Template),
        )
    )
    template = result.scalar_one_or_none()
    if template is None:
        raise NotFoundError("Template", str(template_id))
    if template.created_by_id != user_id:
        raise ForbiddenError(f"You do not have permission to {verb} this template")
    return template


async def update_template(
    db: AsyncSession,
    template_id: uuid.UUID,
    data: TemplateUpdate,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Template:
    template = await _require_own_template(db, template_id, user_id, organization_id, "edit")

    old_values = TemplateResponse.model_validate(template).model_dump(mode="json")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(template, key, value)
    await db.flush()

    await log_event(
        db,
        AuditEventType.UPDATE,
        "template",
        "update",
        resource_id=template.id,
        description=f"Template {template.name} updated",
        user_id=user_id,
        old_values=old_values,
        new_values=TemplateResponse.model_validate(template),
    )
    return template


async def delete_template(
    db: AsyncSession, template_id: uuid.UUID, user_id: uuid.UUID, organization_id: uuid.UUID
) -> None:
    template = await _require_own_template(db, template_id, user_id, organization_id, "delete")

    old_values = TemplateResponse.model_validate(template).model_dump(mode="json")
    template.soft_delete()
    await db.flush()

    await log_event(
        db,
        AuditEventType.DELETE,
        "template",
        "delete",
        resource_id=template.id,
        description=f"Template {template.name} deleted",
        user_id=user_id,
        old_values=old_values,
    )
    logger.info("Template %s deleted by user %s", template.id, user_id)
