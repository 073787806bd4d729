import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.audit.models import AuditEventType
from agent_directory.audit.service import log_event
from agent_directory.core.exceptions import NotFoundError
from agent_directory.db.base import not_deleted
from agent_directory.platforms.models import Platform
from agent_directory.platforms.schemas import (
    PlatformCreate,
    PlatformFilters,
    PlatformResponse,
    PlatformUpdate,
)

logger = logging.getLogger(__name__)


async def create_platform(
    db: AsyncSession, data: PlatformCreate, user_id: uuid.UUID, organization_id: uuid.UUID
) -> Platform:
    platform = Platform(organization_id=organization_id, **data.model_dump())
    db.add(platform)
    await db.flush()

    await log_event(
        db,
        AuditEventType.CREATE,
        "platform",
        "create",
        resource_id=platform.id,
        description=f"Platform {platform.name} created",
        user_id=user_id,
        new_values=PlatformResponse.model_validate(platform),
    )
    logger.info("Platform %s (%s) created by user %s", platform.id, platform.provider, user_id)
    return platform


async def list_platforms(
    db: AsyncSession, organization_id: uuid.UUID, filters: PlatformFilters
) -> list[Platform]:
    q = select(Platform).where(Platform.organization_id == organization_id, not_deleted(Platform))
    if filters.provider is not None:
        q = q.where(Platform.provider == filters.provider)
    result = await db.execute(q.order_by(Platform.name))
    return list(result.scalars().all())


async def get_platform(
    db: AsyncSession, platform_id: uuid.UUID, organization_id: uuid.UUID
) -> Platform:
    result = await db.execute(
        select(Platform).where(
            Platform.id == platform_id,
            Platform.organization_id == organization_id,
            not_deleted(Platform),
        )
    )
    platform = result.scalar_one_or_none()
    if platform is None:
        raise NotFoundError("Platform", str(platform_id))
    return platform


async def update_platform(
    db: AsyncSession,
    platform_id: uuid.UUID,
    data: PlatformUpdate,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Platform:
    platform = await get_platform(db, platform_id, organization_id)
    old_values = PlatformResponse.model_validate(platform).model_dump(mode="json")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(platform, key, value)
    await db.flush()

    await log_event(
        db,
        AuditEventType.UPDATE,
        "platform",
        "update",
        resource_id=platform.id,
        description=f"Platform {platform.name} updated",
        user_id=user_id,
        old_values=old_values,
        new_values=PlatformResponse.model_validate(platform),
    )
    return platform


async def delete_platform(
    db: AsyncSession, platform_id: uuid.UUID, user_id: uuid.UUID, organization_id: uuid.UUID
) -> None:
    platform = await get_platform(db, platform_id, organization_id)
    old_values = PlatformResponse.model_validate(platform).model_dump(mode="json")
    platform.soft_delete()
    await db.flush()

    await log_event(
        db,
        AuditEventType.DELETE,
        "platform",
        "delete",
        resource_id=platform.id,
        description=f"Platform {platform.name} deleted",
        user_id=user_id,
        old_values=old_values,
    )
    logger.info("Platform %s deleted by user %s", platform.id, user_id)
