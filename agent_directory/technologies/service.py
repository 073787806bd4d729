import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.audit.models import AuditEventType
from agent_directory.audit.service import log_event
from agent_directory.core.exceptions import NotFoundError
from agent_directory.db.base import not_deleted
from agent_directory.technologies.models import Technology
from agent_directory.technologies.schemas import (
    TechnologyCreate,
    TechnologyFilters,
    TechnologyResponse,
    TechnologyUpdate,
)


async def create_technology(
    db: AsyncSession, data: TechnologyCreate, user_id: uuid.UUID, organization_id: uuid.UUID
) -> Technology:
    technology = Technology(organization_id=organization_id, **data.model_dump())
    db.add(technology)
    await db.flush()

    await log_event(
        db,
        AuditEventType.CREATE,
        "technology",
        "create",
        resource_id=technology.id,
        description=f"Technology {technology.name} created",
        user_id=user_id,
        new_values=TechnologyResponse.model_validate(technology),
    )
    return technology


async def list_technologies(
    db: AsyncSession, organization_id: uuid.UUID, filters: TechnologyFilters
) -> list[Technology]:
    q = select(Technology).where(
        Technology.organization_id == organization_id, not_deleted(Technology)
    )
    if filters.type is not None:
        q = q.where(Technology.type == filters.type)
    result = await db.execute(q.order_by(Technology.name))
    return list(result.scalars().all())


async def get_technology(
    db: AsyncSession, technology_id: uuid.UUID, organization_id: uuid.UUID
) -> Technology:
    result = await db.execute(
        select(Technology).where(
            Technology.id == technology_id,
            Technology.organization_id == organization_id,
            not_deleted(Technology),
        )
    )
    technology = result.scalar_one_or_none()
    if technology is None:
        raise NotFoundError("Technology", str(technology_id))
    return technology


async def update_technology(
    db: AsyncSession,
    technology_id: uuid.UUID,
    data: TechnologyUpdate,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Technology:
    technology = await get_technology(db, technology_id, organization_id)
    old_values = TechnologyResponse.model_validate(technology).model_dump(mode="json")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(technology, key, value)
    await db.flush()

    await log_event(
        db,
        AuditEventType.UPDATE,
        "technology",
        "update",
        resource_id=technology.id,
        description=f"Technology {technology.name} updated",
        user_id=user_id,
        old_values=old_values,
        new_values=TechnologyResponse.model_validate(technology),
    )
    return technology


async def delete_technology(
    db: AsyncSession, technology_id: uuid.UUID, user_id: uuid.UUID, organization_id: uuid.UUID
) -> None:
    technology = await get_technology(db, technology_id, organization_id)
    old_values = TechnologyResponse.model_validate(technology).model_dump(mode="json")
    technology.soft_delete()
    await db.flush()

    await log_event(
        db,
        AuditEventType.DELETE,
        "technology",
        "delete",
        resource_id=technology.id,
        description=f"Technology {technology.name} deleted",
        user_id=user_id,
        old_values=old_values,
    )
