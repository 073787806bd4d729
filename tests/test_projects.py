"""Tests for projects: versioned snapshots, ownership rules, tenant isolation."""
import uuid

import pytest
from conftest import api_client, make_user, principal_for
from sqlalchemy import select

from agent_directory.audit.models import AuditEventType, AuditLog
from agent_directory.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from agent_directory.projects import service as project_service
from agent_directory.projects.models import ProjectMemberRole, ProjectStatus
from agent_directory.projects.schemas import ProjectCreate, ProjectFilters, ProjectUpdate
from agent_directory.versioning.models import ConfigurationType
from agent_directory.versioning.service import get_version_history


async def _audit(db, resource: str) -> list[AuditLog]:
    result = await db.execute(
        select(AuditLog).where(AuditLog.resource == resource).order_by(AuditLog.created_at)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_create_project_over_http(db, tenant):
    org, owner, _ = tenant

    async with api_client(db, principal_for(owner)) as client:
        response = await client.post(
            "/projects",
            json={"name": "Support Bots", "slug": "support-bots", "description": "Tier 1"},
        )

    assert response.status_code == 201
    body = response.json()
    assert body["slug"] == "support-bots"
    assert body["owner_id"] == str(owner.id)
    assert body["organization_id"] == str(org.id)
    assert body["status"] == "DEVELOPMENT"
    assert body["visibility"] == "PRIVATE"

    project_id = uuid.UUID(body["id"])
    members = await project_service.list_members(db, project_id)
    assert [(m.user_id, m.role) for m in members] == [(owner.id, ProjectMemberRole.OWNER)]

    history = await get_version_history(db, project_id, entity_id=project_id)
    assert len(history) == 1
    assert history[0].version == 1
    assert history[0].configuration_type == ConfigurationType.PROJECT
    assert history[0].content["slug"] == "support-bots"
    assert history[0].diff is None

    created = [e for e in await _audit(db, "project") if e.event_type == AuditEventType.CREATE]
    assert len(created) == 1
    assert created[0].resource_id == str(project_id)


@pytest.mark.asyncio
async def test_slug_is_unique_per_organization(db, tenant, other_tenant):
    org, owner, _ = tenant
    other_org, other_owner, _ = other_tenant

    with pytest.raises(ConflictError):
        await project_service.create_project(
            db, ProjectCreate(name="Dup", slug="directory"), owner.id, org.id
        )

    # Same slug in a different tenant is fine
    project = await project_service.create_project(
        db, ProjectCreate(name="Dup", slug="directory"), other_owner.id, other_org.id
    )
    await db.commit()
    assert project.organization_id == other_org.id


def test_slug_format_is_validated():
    with pytest.raises(ValueError):
        ProjectCreate(name="Bad", slug="Not A Slug")
    with pytest.raises(ValueError):
        ProjectCreate(name="Bad", slug="trailing-")


@pytest.mark.asyncio
async def test_update_requires_membership_and_creates_version(db, tenant):
    org, owner, project = tenant
    outsider = await make_user(db, org, "outsider@acme.com")
    editor = await make_user(db, org, "editor@acme.com")
    await project_service.add_member(
        db, project.id, editor.id, ProjectMemberRole.EDITOR, owner.id, org.id
    )
    await db.commit()

    with pytest.raises(ForbiddenError):
        await project_service.update_project(
            db, project.id, ProjectUpdate(name="Hijacked"), outsider.id, org.id
        )

    updated = await project_service.update_project(
        db, project.id, ProjectUpdate(description="Edited"), editor.id, org.id
    )
    await db.commit()
    assert updated.description == "Edited"
    assert updated.name == "Directory"

    history = await get_version_history(db, project.id, entity_id=project.id)
    assert [v.version for v in history] == [1]
    assert history[0].created_by == editor.id
    assert history[0].diff is None


@pytest.mark.asyncio
async def test_second_update_diffs_against_first(db, tenant):
    org, owner, project = tenant

    await project_service.update_project(
        db, project.id, ProjectUpdate(description="First"), owner.id, org.id
    )
    await project_service.update_project(
        db, project.id, ProjectUpdate(description="Second"), owner.id, org.id
    )
    await db.commit()

    history = await get_version_history(db, project.id, entity_id=project.id)
    assert [v.version for v in history] == [2, 1]
    assert '-  "description": "First",' in history[0].diff
    assert '+  "description": "Second",' in history[0].diff

    updates = [e for e in await _audit(db, "project") if e.event_type == AuditEventType.UPDATE]
    assert len(updates) == 2
    assert updates[1].old_values["description"] == "First"
    assert updates[1].new_values["description"] == "Second"


@pytest.mark.asyncio
async def test_status_change_is_audited(db, tenant):
    org, owner, project = tenant

    async with api_client(db, principal_for(owner)) as client:
        response = await client.patch(f"/projects/{project.id}/status", json={"status": "QA"})

    assert response.status_code == 200
    assert response.json()["status"] == "QA"

    changes = [e for e in await _audit(db, "project") if e.event_type == AuditEventType.STATUS_CHANGE]
    assert len(changes) == 1
    assert changes[0].old_values == {"status": "DEVELOPMENT"}
    assert changes[0].new_values == {"status": "QA"}


@pytest.mark.asyncio
async def test_only_owner_archives(db, tenant):
    org, owner, project = tenant
    editor = await make_user(db, org, "editor@acme.com")
    await project_service.add_member(
        db, project.id, editor.id, ProjectMemberRole.EDITOR, owner.id, org.id
    )
    await db.commit()

    async with api_client(db, principal_for(editor)) as client:
        forbidden = await client.delete(f"/projects/{project.id}")
    assert forbidden.status_code == 403
    assert forbidden.json() == {"detail": "Only the owner can delete this project"}

    async with api_client(db, principal_for(owner)) as client:
        archived = await client.delete(f"/projects/{project.id}")
        still_there = await client.get(f"/projects/{project.id}")

    assert archived.status_code == 200
    assert archived.json()["status"] == "ARCHIVED"
    assert still_there.status_code == 200

    deletes = [e for e in await _audit(db, "project") if e.event_type == AuditEventType.DELETE]
    assert [e.action for e in deletes] == ["archive"]


@pytest.mark.asyncio
async def test_member_management(db, tenant, other_tenant):
    org, owner, project = tenant
    _, stranger, _ = other_tenant
    viewer = await make_user(db, org, "viewer@acme.com")
    await db.commit()

    async with api_client(db, principal_for(owner)) as client:
        added = await client.post(
            f"/projects/{project.id}/members", json={"user_id": str(viewer.id)}
        )
        duplicate = await client.post(
            f"/projects/{project.id}/members", json={"user_id": str(viewer.id)}
        )
        cross_tenant = await client.post(
            f"/projects/{project.id}/members", json={"user_id": str(stranger.id)}
        )
        detail = await client.get(f"/projects/{project.id}")

    assert added.status_code == 201
    assert added.json()["role"] == "VIEWER"
    assert duplicate.status_code == 409
    assert cross_tenant.status_code == 404
    assert {m["user_id"] for m in detail.json()["members"]} == {str(owner.id), str(viewer.id)}

    async with api_client(db, principal_for(viewer)) as client:
        not_owner = await client.delete(f"/projects/{project.id}/members/{owner.id}")
    assert not_owner.status_code == 403

    async with api_client(db, principal_for(owner)) as client:
        removed = await client.delete(f"/projects/{project.id}/members/{viewer.id}")
        missing = await client.delete(f"/projects/{project.id}/members/{viewer.id}")
    assert removed.status_code == 204
    assert missing.status_code == 404

    actions = [e.action for e in await _audit(db, "project_member")]
    assert actions == ["add_member", "remove_member"]


@pytest.mark.asyncio
async def test_other_tenants_projects_are_not_found(db, tenant, other_tenant):
    _, owner, _ = tenant
    _, _, rival = other_tenant

    async with api_client(db, principal_for(owner)) as client:
        fetched = await client.get(f"/projects/{rival.id}")
        patched = await client.patch(f"/projects/{rival.id}", json={"name": "Mine now"})
        listed = await client.get("/projects")

    assert fetched.status_code == 404
    assert patched.status_code == 404
    assert [p["slug"] for p in listed.json()] == ["directory"]

    with pytest.raises(NotFoundError):
        await project_service.get_project(db, rival.id, owner.organization_id)


@pytest.mark.asyncio
async def test_list_filters(db, tenant):
    org, owner, project = tenant
    second = await project_service.create_project(
        db, ProjectCreate(name="Live", slug="live", status=ProjectStatus.PRODUCTION), owner.id, org.id
    )
    await db.commit()

    production = await project_service.list_projects(
        db, org.id, ProjectFilters(status=ProjectStatus.PRODUCTION)
    )
    assert [p.id for p in production] == [second.id]

    async with api_client(db, principal_for(owner)) as client:
        response = await client.get("/projects", params={"status": "DEVELOPMENT"})
    assert [p["id"] for p in response.json()] == [str(project.id)]


@pytest.mark.asyncio
async def test_routes_enforce_permissions(db, tenant):
    _, owner, project = tenant

    async with api_client(db, principal_for(owner, {"projects.read"})) as client:
        create = await client.post("/projects", json={"name": "X", "slug": "x"})
        read = await client.get(f"/projects/{project.id}")
        archive = await client.delete(f"/projects/{project.id}")

    assert create.status_code == 403
    assert read.status_code == 200
    assert archive.status_code == 403


@pytest.mark.asyncio
async def test_null_for_required_fields_is_a_validation_error(db, tenant):
    _, owner, project = tenant

    async with api_client(db, principal_for(owner)) as client:
        null_name = await client.patch(f"/projects/{project.id}", json={"name": None})
        null_visibility = await client.patch(f"/projects/{project.id}", json={"visibility": None})
        null_description = await client.patch(f"/projects/{project.id}", json={"description": None})

    assert null_name.status_code == 422
    assert null_visibility.status_code == 422
    assert null_description.status_code == 200
    assert null_description.json()["name"] == "Directory"

    with pytest.raises(ValueError):
        ProjectUpdate(name=None)
    assert ProjectUpdate().model_dump(exclude_unset=True) == {}
