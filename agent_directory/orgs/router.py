import uuid

from fastapi import APIRouter

from agent_directory.core.dependencies import CurrentUser, DbSession
from agent_directory.orgs import service as org_service
from agent_directory.orgs.schemas import OrgResponse

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.get("", response_model=list[OrgResponse])
async def list_orgs(user: CurrentUser, db: DbSession):
    return await org_service.list_orgs(db, user.organization_id)


@router.get("/{org_id}", response_model=OrgResponse)
async def get_org(org_id: uuid.UUID, user: CurrentUser, db: DbSession):
    return await org_service.get_org(db, org_id, user.organization_id)
