"""Tests for the audit recorder and its query surface."""
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from conftest import api_client, make_user, principal_for

from agent_directory.audit.models import AuditEventType, AuditLog
from agent_directory.audit.schemas import AuditLogFilters
from agent_directory.audit.service import export_logs, find_all, find_one, log_event
from agent_directory.core.exceptions import NotFoundError

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


async def _seed_logs(db, user):
    """Five rows one hour apart, oldest first."""
    rows = [
        (AuditEventType.CREATE, "project", user.id),
        (AuditEventType.UPDATE, "project", user.id),
        (AuditEventType.CREATE, "agent", user.id),
        (AuditEventType.AUTH_FAILED, "user", None),
        (AuditEventType.DELETE, "agent", user.id),
    ]
    for i, (event_type, resource, user_id) in enumerate(rows):
        db.add(
            AuditLog(
                event_type=event_type,
                resource=resource,
                action=event_type.value.lower(),
                user_id=user_id,
                created_at=BASE_TIME + timedelta(hours=i),
            )
        )
    await db.commit()


@pytest.mark.asyncio
async def test_log_event_stores_json_safe_snapshots(db, tenant):
    _, owner, project = tenant

    entry = await log_event(
        db,
        AuditEventType.UPDATE,
        "project",
        "update",
        resource_id=project.id,
        user_id=owner.id,
        ip_address="10.0.0.1",
        old_values={"id": project.id, "at": BASE_TIME},
        new_values={"name": "Renamed"},
        metadata={"source": "test"},
    )
    await db.commit()

    stored = await find_one(db, entry.id)
    assert stored.resource_id == str(project.id)
    assert stored.old_values == {"id": str(project.id), "at": BASE_TIME.isoformat()}
    assert stored.new_values == {"name": "Renamed"}
    assert stored.metadata_ == {"source": "test"}
    assert stored.ip_address == "10.0.0.1"


@pytest.mark.asyncio
async def test_log_event_requires_resource_and_action(db):
    with pytest.raises(ValueError):
        await log_event(db, AuditEventType.CREATE, "", "create")
    with pytest.raises(ValueError):
        await log_event(db, AuditEventType.CREATE, "project", "")


@pytest.mark.asyncio
async def test_find_all_filters_and_orders_newest_first(db, tenant):
    _, owner, _ = tenant
    await _seed_logs(db, owner)

    items, meta = await find_all(db, AuditLogFilters(resource="agent"))
    assert [e.event_type for e in items] == [AuditEventType.DELETE, AuditEventType.CREATE]
    assert meta.total == 2

    items, _ = await find_all(db, AuditLogFilters(event_type=AuditEventType.AUTH_FAILED))
    assert len(items) == 1
    assert items[0].user_id is None

    items, meta = await find_all(db, AuditLogFilters(user_id=owner.id))
    assert meta.total == 4


@pytest.mark.asyncio
async def test_date_range_bounds_are_inclusive(db, tenant):
    _, owner, _ = tenant
    await _seed_logs(db, owner)

    filters = AuditLogFilters(
        start_date=BASE_TIME + timedelta(hours=1),
        end_date=BASE_TIME + timedelta(hours=3),
    )
    items, meta = await find_all(db, filters)

    assert meta.total == 3
    assert [e.event_type for e in items] == [
        AuditEventType.AUTH_FAILED,
        AuditEventType.CREATE,
        AuditEventType.UPDATE,
    ]


@pytest.mark.asyncio
async def test_pagination_meta(db, tenant):
    _, owner, _ = tenant
    await _seed_logs(db, owner)

    items, meta = await find_all(db, AuditLogFilters(page=2, limit=2))
    assert len(items) == 2
    assert meta.total == 5
    assert meta.page == 2
    assert meta.limit == 2
    assert meta.total_pages == 3
    assert items[0].event_type == AuditEventType.CREATE

    items, meta = await find_all(db, AuditLogFilters(page=4, limit=2))
    assert items == []
    assert meta.total_pages == 3


@pytest.mark.asyncio
async def test_export_ignores_paging(db, tenant):
    _, owner, _ = tenant
    await _seed_logs(db, owner)

    rows = await export_logs(db, AuditLogFilters(page=3, limit=1))
    assert len(rows) == 5
    assert rows[0].event_type == AuditEventType.DELETE


@pytest.mark.asyncio
async def test_find_one_missing_raises(db):
    with pytest.raises(NotFoundError):
        await find_one(db, uuid.uuid4())


@pytest.mark.asyncio
async def test_audit_endpoints_require_permissions(db, tenant):
    org, owner, _ = tenant
    await _seed_logs(db, owner)
    reader = await make_user(db, org, "reader@acme.com")
    await db.commit()

    async with api_client(db, principal_for(reader, {"audit.read"})) as client:
        listed = await client.get("/audit", params={"resource": "project", "limit": 10})
        exported = await client.get("/audit/export")

    assert listed.status_code == 200
    body = listed.json()
    assert body["meta"]["total"] == 2
    assert {item["resource"] for item in body["items"]} == {"project"}
    assert exported.status_code == 403

    async with api_client(db, principal_for(reader, {"projects.read"})) as client:
        denied = await client.get("/audit")
    assert denied.status_code == 403
    assert denied.json() == {"detail": "Insufficient permissions for this action"}


@pytest.mark.asyncio
async def test_audit_detail_endpoint(db, tenant):
    _, owner, _ = tenant
    entry = await log_event(db, AuditEventType.CREATE, "tag", "create", user_id=owner.id)
    await db.commit()

    async with api_client(db, principal_for(owner)) as client:
        found = await client.get(f"/audit/{entry.id}")
        missing = await client.get(f"/audit/{uuid.uuid4()}")

    assert found.status_code == 200
    assert found.json()["resource"] == "tag"
    assert found.json()["metadata"] is None
    assert "metadata_" not in found.json()
    assert missing.status_code == 404
