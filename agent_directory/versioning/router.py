import uuid

from fastapi import APIRouter

from agent_directory.core.dependencies import CurrentUser, DbSession
from agent_directory.core.tenancy import assert_project_member, require_org_project
from agent_directory.versioning import service as version_service
from agent_directory.versioning.schemas import VersionComparisonResponse, VersionResponse

router = APIRouter(prefix="/versioning", tags=["versioning"])


@router.get("/project/{project_id}", response_model=list[VersionResponse])
async def get_version_history(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    entity_id: uuid.UUID | None = None,
):
    await require_org_project(db, project_id, user.organization_id)
    return await version_service.get_version_history(db, project_id, entity_id=entity_id)


@router.get("/compare/{version_id_1}/{version_id_2}", response_model=VersionComparisonResponse)
async def compare_versions(
    version_id_1: uuid.UUID, version_id_2: uuid.UUID, user: CurrentUser, db: DbSession
):
    comparison = await version_service.compare_versions(db, version_id_1, version_id_2)
    await require_org_project(db, comparison.version1.project_id, user.organization_id)
    await require_org_project(db, comparison.version2.project_id, user.organization_id)
    return comparison


@router.get("/{version_id}", response_model=VersionResponse)
async def get_version(version_id: uuid.UUID, user: CurrentUser, db: DbSession):
    version = await version_service.get_version(db, version_id)
    await require_org_project(db, version.project_id, user.organization_id)
    return version


@router.post("/restore/{version_id}", response_model=VersionResponse, status_code=201)
async def restore_version(version_id: uuid.UUID, user: CurrentUser, db: DbSession):
    version = await version_service.get_version(db, version_id)
    project = await require_org_project(db, version.project_id, user.organization_id)
    await assert_project_member(
        db, project, user.id, "You do not have permission to restore versions in this project"
    )
    restored = await version_service.restore_version(db, version_id, user_id=user.id)
    await db.commit()
    return restored
