"""Tests for user administration and organization lookups."""
import uuid

import pytest
from conftest import api_client, make_user, principal_for
from sqlalchemy import select

from agent_directory.audit.models import AuditLog
from agent_directory.auth.models import Role
from agent_directory.core.exceptions import ConflictError, NotFoundError
from agent_directory.orgs.service import slugify
from agent_directory.users import service as user_service


async def _role(db, name="Editor") -> Role:
    role = Role(name=name, description=f"{name} role")
    db.add(role)
    await db.flush()
    return role


def test_slugify():
    assert slugify("Acme Corp") == "acme-corp"
    assert slugify("  Hello, World!  ") == "hello-world"


@pytest.mark.asyncio
async def test_update_and_deactivate_are_audited(db, tenant):
    org, admin, _ = tenant
    member = await make_user(db, org, "member@acme.com")
    await db.commit()

    async with api_client(db, principal_for(admin)) as client:
        patched = await client.patch(f"/users/{member.id}", json={"first_name": "Mia"})
        deactivated = await client.delete(f"/users/{member.id}")

    assert patched.status_code == 200
    assert patched.json()["first_name"] == "Mia"
    assert deactivated.status_code == 200
    assert deactivated.json()["is_active"] is False

    result = await db.execute(
        select(AuditLog).where(AuditLog.resource == "user").order_by(AuditLog.created_at)
    )
    events = list(result.scalars().all())
    assert [e.action for e in events] == ["update", "deactivate"]
    assert all(e.user_id == admin.id for e in events)
    assert events[0].new_values["first_name"] == "Mia"


@pytest.mark.asyncio
async def test_role_assignment(db, tenant):
    org, admin, _ = tenant
    member = await make_user(db, org, "member@acme.com")
    role = await _role(db)
    await db.commit()

    async with api_client(db, principal_for(admin)) as client:
        assigned = await client.post(f"/users/{member.id}/roles", json={"role_id": str(role.id)})
        duplicate = await client.post(f"/users/{member.id}/roles", json={"role_id": str(role.id)})
        detail = await client.get(f"/users/{member.id}")
        removed = await client.delete(f"/users/{member.id}/roles/{role.id}")
        missing = await client.delete(f"/users/{member.id}/roles/{role.id}")

    assert assigned.status_code == 201
    assert duplicate.status_code == 409
    assert [r["name"] for r in detail.json()["roles"]] == ["Editor"]
    assert removed.status_code == 204
    assert missing.status_code == 404

    assert await user_service.list_user_roles(db, member.id) == []


@pytest.mark.asyncio
async def test_assigning_unknown_role_is_not_found(db, tenant):
    org, admin, _ = tenant
    with pytest.raises(NotFoundError):
        await user_service.assign_role(db, admin.id, uuid.uuid4(), admin.id, org.id)


@pytest.mark.asyncio
async def test_duplicate_role_is_conflict(db, tenant):
    org, admin, _ = tenant
    role = await _role(db, "Reviewer")
    await user_service.assign_role(db, admin.id, role.id, admin.id, org.id)
    await db.commit()

    with pytest.raises(ConflictError):
        await user_service.assign_role(db, admin.id, role.id, admin.id, org.id)


@pytest.mark.asyncio
async def test_users_and_orgs_are_tenant_scoped(db, tenant, other_tenant):
    org, admin, _ = tenant
    other_org, stranger, _ = other_tenant

    async with api_client(db, principal_for(admin)) as client:
        users = await client.get("/users")
        foreign_user = await client.get(f"/users/{stranger.id}")
        orgs = await client.get("/organizations")
        own_org = await client.get(f"/organizations/{org.id}")
        foreign_org = await client.get(f"/organizations/{other_org.id}")

    assert [u["email"] for u in users.json()] == ["owner@acme.com"]
    assert foreign_user.status_code == 404
    assert [o["slug"] for o in orgs.json()] == ["acme"]
    assert own_org.json()["id"] == str(org.id)
    assert foreign_org.status_code == 404


@pytest.mark.asyncio
async def test_user_routes_enforce_permissions(db, tenant):
    _, admin, _ = tenant

    async with api_client(db, principal_for(admin, {"users.read"})) as client:
        listed = await client.get("/users")
        denied = await client.delete(f"/users/{admin.id}")

    assert listed.status_code == 200
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_health(db):
    async with api_client(db) as client:
        response = await client.get("/health")
    assert response.json() == {"status": "ok", "version": "1.0.0"}


@pytest.mark.asyncio
async def test_deactivation_records_the_real_previous_state(db, tenant):
    org, admin, _ = tenant
    member = await make_user(db, org, "member@acme.com")
    await db.commit()

    await user_service.deactivate_user(db, member.id, admin.id, org.id)
    await user_service.deactivate_user(db, member.id, admin.id, org.id)
    await db.commit()

    result = await db.execute(
        select(AuditLog).where(AuditLog.action == "deactivate").order_by(AuditLog.created_at)
    )
    events = list(result.scalars().all())
    assert [e.old_values for e in events] == [{"is_active": True}, {"is_active": False}]
    assert [e.new_values for e in events] == [{"is_active": False}, {"is_active": False}]
