"""Organization tags. System tags are seeded and cannot be deleted."""
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.audit.models import AuditEventType
from agent_directory.audit.service import log_event
from agent_directory.core.exceptions import ConflictError, NotFoundError
from agent_directory.db.base import not_deleted
from agent_directory.tags.models import Tag
from agent_directory.tags.schemas import TagCreate, TagFilters, TagResponse, TagUpdate


async def _assert_name_free(
    db: AsyncSession, organization_id: uuid.UUID, name: str, exclude_id: uuid.UUID | None = None
) -> None:
    q = select(Tag.id).where(
        Tag.organization_id == organization_id, Tag.name == name, not_deleted(Tag)
    )
    if exclude_id is not None:
        q = q.where(Tag.id != exclude_id)
    result = await db.execute(q)
    if result.first() is not None:
        raise ConflictError(f"A tag named '{name}' already exists")


async def create_tag(
    db: AsyncSession, data: TagCreate, user_id: uuid.UUID, organization_id: uuid.UUID
) -> Tag:
    await _assert_name_free(db, organization_id, data.name)

    tag = Tag(organization_id=organization_id, **data.model_dump())
    db.add(tag)
    await db.flush()

    await log_event(
        db,
        AuditEventType.CREATE,
        "tag",
        "create",
        resource_id=tag.id,
        description=f"Tag {tag.name} created",
        user_id=user_id,
        new_values=TagResponse.model_validate(tag),
    )
    return tag


async def list_tags(db: AsyncSession, organization_id: uuid.UUID, filters: TagFilters) -> list[Tag]:
    q = select(Tag).where(Tag.organization_id == organization_id, not_deleted(Tag))
    if filters.is_system is not None:
        q = q.where(Tag.is_system == filters.is_system)
    result = await db.execute(q.order_by(Tag.name))
    return list(result.scalars().all())


async def get_tag(db: AsyncSession, tag_id: uuid.UUID, organization_id: uuid.UUID) -> Tag:
    result = await db.execute(
        select(Tag).where(
            Tag.id == tag_id, Tag.organization_id == organization_id, not_deleted(Tag)
        )
    )
    tag = result.scalar_one_or_none()
    if tag is None:
        raise NotFoundError("Tag", str(tag_id))
    return tag


async def update_tag(
    db: AsyncSession,
    tag_id: uuid.UUID,
    data: TagUpdate,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> Tag:
    tag = await get_tag(db, tag_id, organization_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("name") is not None and changes["name"] != tag.name:
        await _assert_name_free(db, organization_id, changes["name"], exclude_id=tag.id)

    old_values = TagResponse.model_validate(tag).model_dump(mode="json")
    for key, value in changes.items():
        setattr(tag, key, value)
    await db.flush()

    await log_event(
        db,
        AuditEventType.UPDATE,
        "tag",
        "update",
        resource_id=tag.id,
        description=f"Tag {tag.name} updated",
        user_id=user_id,
        old_values=old_values,
        new_values=TagResponse.model_validate(tag),
    )
    return tag


async def delete_tag(
    db: AsyncSession, tag_id: uuid.UUID, user_id: uuid.UUID, organization_id: uuid.UUID
) -> None:
    tag = await get_tag(db, tag_id, organization_id)
    if tag.is_system:
        raise ConflictError("System tags cannot be deleted")

    old_values = TagResponse.model_validate(tag).model_dump(mode="json")
    tag.soft_delete()
    await db.flush()

    await log_event(
        db,
        AuditEventType.DELETE,
        "tag",
        "delete",
        resource_id=tag.id,
        description=f"Tag {tag.name} deleted",
        user_id=user_id,
        old_values=old_values,
    )
