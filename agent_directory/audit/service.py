"""Audit log service: append-only, never update or delete."""
import uuid
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.audit.models import AuditEventType, AuditLog
from agent_directory.audit.schemas import AuditLogFilters
from agent_directory.core.exceptions import NotFoundError
from agent_directory.core.pagination import PageMeta, page_meta


def _snapshot(value: Any) -> Any:
    """Make ORM-derived dicts (UUIDs, datetimes, enums) storable as JSON."""
    if value is None:
        return None
    return jsonable_encoder(value)


async def log_event(
    db: AsyncSession,
    event_type: AuditEventType,
    resource: str,
    action: str,
    *,
    resource_id: uuid.UUID | str | None = None,
    description: str | None = None,
    user_id: uuid.UUID | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    old_values: Any = None,
    new_values: Any = None,
    metadata: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Append one audit row in the caller's transaction.
    Storage errors propagate; there is no business-rule validation here.
    """
    if not resource or not action:
        raise ValueError("Audit events require a resource and an action")

    entry = AuditLog(
        event_type=event_type,
        resource=resource,
        resource_id=str(resource_id) if resource_id is not None else None,
        action=action,
        description=description,
        user_id=user_id,
        ip_address=ip_address,
        user_agent=user_agent,
        old_values=_snapshot(old_values),
        new_values=_snapshot(new_values),
        metadata_=_snapshot(metadata),
    )
    db.add(entry)
    await db.flush()
    return entry


def _filtered(q, filters: AuditLogFilters):
    if filters.event_type is not None:
        q = q.where(AuditLog.event_type == filters.event_type)
    if filters.resource is not None:
        q = q.where(AuditLog.resource == filters.resource)
    if filters.user_id is not None:
        q = q.where(AuditLog.user_id == filters.user_id)
    # Both bounds are inclusive
    if filters.start_date is not None:
        q = q.where(AuditLog.created_at >= filters.start_date)
    if filters.end_date is not None:
        q = q.where(AuditLog.created_at <= filters.end_date)
    return q


async def find_all(
    db: AsyncSession, filters: AuditLogFilters
) -> tuple[list[AuditLog], PageMeta]:
    total_result = await db.execute(_filtered(select(func.count(AuditLog.id)), filters))
    total = int(total_result.scalar_one())

    result = await db.execute(
        _filtered(select(AuditLog), filters)
        .order_by(AuditLog.created_at.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    return list(result.scalars().all()), page_meta(total, filters)


async def find_one(db: AsyncSession, log_id: uuid.UUID) -> AuditLog:
    result = await db.execute(select(AuditLog).where(AuditLog.id == log_id))
    entry = result.scalar_one_or_none()
    if entry is None:
        raise NotFoundError("AuditLog", str(log_id))
    return entry


async def export_logs(db: AsyncSession, filters: AuditLogFilters) -> list[AuditLog]:
    """Every matching row, newest first; paging fields are ignored."""
    result = await db.execute(
        _filtered(select(AuditLog), filters).order_by(AuditLog.created_at.desc())
    )
    return list(result.scalars().all())
