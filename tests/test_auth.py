"""Tests for authentication: register, login auditing, tokens, current user."""
import pytest
from conftest import api_client, make_org, make_user
from sqlalchemy import func, select

from agent_directory.audit.models import AuditEventType, AuditLog
from agent_directory.auth.models import Permission, Role, RolePermission, User, UserRole
from agent_directory.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from agent_directory.versioning.models import ConfigurationVersion


async def _default_role(db) -> Role:
    role = Role(name="User", is_default=True, is_system=True)
    perm = Permission(name="projects.read", resource="projects", action="read")
    db.add_all([role, perm])
    await db.flush()
    db.add(RolePermission(role_id=role.id, permission_id=perm.id))
    await db.flush()
    return role


async def _audit_rows(db, event_type: AuditEventType) -> list[AuditLog]:
    result = await db.execute(select(AuditLog).where(AuditLog.event_type == event_type))
    return list(result.scalars().all())


def test_tokens_are_typed():
    access = create_access_token("user-1")
    refresh = create_refresh_token("user-1")

    assert decode_token(access)["sub"] == "user-1"
    assert decode_token(refresh) is None
    assert decode_token(refresh, token_type=REFRESH_TOKEN)["sub"] == "user-1"
    assert decode_token(access, token_type=REFRESH_TOKEN) is None
    assert decode_token("not-a-jwt") is None


@pytest.mark.asyncio
async def test_register_assigns_default_role_and_audits(db):
    org = await make_org(db)
    role = await _default_role(db)
    await db.commit()

    async with api_client(db) as client:
        response = await client.post(
            "/auth/register",
            json={
                "email": "new@acme.com",
                "password": "secret123",
                "first_name": "New",
                "organization_id": str(org.id),
            },
        )

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "new@acme.com"
    assert body["access_token"] and body["refresh_token"]
    assert "hashed_password" not in body["user"]

    user = (await db.execute(select(User).where(User.email == "new@acme.com"))).scalar_one()
    roles = await db.execute(select(UserRole.role_id).where(UserRole.user_id == user.id))
    assert list(roles.scalars().all()) == [role.id]

    created = await _audit_rows(db, AuditEventType.CREATE)
    assert [(e.resource, e.action, e.user_id) for e in created] == [("user", "register", user.id)]


@pytest.mark.asyncio
async def test_register_rejects_duplicates_and_inactive_orgs(db):
    org = await make_org(db)
    await make_user(db, org, "taken@acme.com")
    closed = await make_org(db, "closed")
    closed.is_active = False
    await db.commit()

    async with api_client(db) as client:
        duplicate = await client.post(
            "/auth/register",
            json={"email": "taken@acme.com", "password": "secret123", "organization_id": str(org.id)},
        )
        inactive = await client.post(
            "/auth/register",
            json={"email": "fresh@acme.com", "password": "secret123", "organization_id": str(closed.id)},
        )

    assert duplicate.status_code == 409
    assert inactive.status_code == 401


@pytest.mark.asyncio
async def test_failed_login_writes_one_committed_audit_row(db):
    org = await make_org(db)
    await make_user(db, org, "someone@acme.com", password="right-password")
    await db.commit()

    async with api_client(db) as client:
        response = await client.post(
            "/auth/login",
            json={"email": "someone@acme.com", "password": "wrong-password"},
            headers={"user-agent": "pytest-agent"},
        )

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid credentials"}

    # Anything uncommitted would vanish here
    await db.rollback()
    failed = await _audit_rows(db, AuditEventType.AUTH_FAILED)
    assert len(failed) == 1
    assert failed[0].user_id is None
    assert failed[0].user_agent == "pytest-agent"
    assert "someone@acme.com" in failed[0].description

    versions = await db.execute(select(func.count(ConfigurationVersion.id)))
    assert versions.scalar_one() == 0


@pytest.mark.asyncio
async def test_unknown_email_is_indistinguishable_from_bad_password(db):
    async with api_client(db) as client:
        response = await client.post(
            "/auth/login", json={"email": "ghost@acme.com", "password": "whatever"}
        )

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid credentials"}
    assert len(await _audit_rows(db, AuditEventType.AUTH_FAILED)) == 1


@pytest.mark.asyncio
async def test_login_then_me_with_bearer_token(db):
    org = await make_org(db)
    role = await _default_role(db)
    user = await make_user(db, org, "member@acme.com", password="pw-123456")
    db.add(UserRole(user_id=user.id, role_id=role.id))
    await db.commit()

    async with api_client(db) as client:
        login = await client.post(
            "/auth/login", json={"email": "member@acme.com", "password": "pw-123456"}
        )
        assert login.status_code == 200
        token = login.json()["access_token"]

        me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        anonymous = await client.get("/auth/me")

    assert me.status_code == 200
    body = me.json()
    assert body["email"] == "member@acme.com"
    assert body["roles"] == ["User"]
    assert body["permissions"] == ["projects.read"]
    assert body["last_login_at"] is not None
    assert anonymous.status_code == 401

    logins = await _audit_rows(db, AuditEventType.AUTH_LOGIN)
    assert [e.user_id for e in logins] == [user.id]


@pytest.mark.asyncio
async def test_refresh_issues_new_pair_and_rejects_access_tokens(db):
    org = await make_org(db)
    user = await make_user(db, org, "refresh@acme.com")
    await db.commit()

    async with api_client(db) as client:
        ok = await client.post(
            "/auth/refresh", json={"refresh_token": create_refresh_token(str(user.id))}
        )
        wrong_type = await client.post(
            "/auth/refresh", json={"refresh_token": create_access_token(str(user.id))}
        )

    assert ok.status_code == 200
    assert decode_token(ok.json()["access_token"])["sub"] == str(user.id)
    assert wrong_type.status_code == 401


@pytest.mark.asyncio
async def test_logout_is_audited(db):
    org = await make_org(db)
    user = await make_user(db, org, "bye@acme.com")
    await db.commit()
    token = create_access_token(str(user.id))

    async with api_client(db) as client:
        response = await client.post("/auth/logout", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    logouts = await _audit_rows(db, AuditEventType.AUTH_LOGOUT)
    assert [e.user_id for e in logouts] == [user.id]


@pytest.mark.asyncio
async def test_deactivated_user_token_is_rejected(db):
    org = await make_org(db)
    user = await make_user(db, org, "gone@acme.com")
    user.is_active = False
    await db.commit()
    token = create_access_token(str(user.id))

    async with api_client(db) as client:
        response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        login = await client.post(
            "/auth/login", json={"email": "gone@acme.com", "password": "password"}
        )

    assert response.status_code == 401
    assert login.status_code == 401
