import uuid
from typing import Annotated

from fastapi import APIRouter, Depends

from agent_directory.auth.schemas import UserResponse
from agent_directory.core.dependencies import DbSession, Principal, require_permissions
from agent_directory.users import service as user_service
from agent_directory.users.schemas import RoleAssign, RoleSummary, UserDetail, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(
    user: Annotated[Principal, Depends(require_permissions("users.read"))],
    db: DbSession,
):
    return await user_service.list_users(db, user.organization_id)


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("users.read"))],
    db: DbSession,
):
    account = await user_service.get_user(db, user_id, user.organization_id)
    roles = await user_service.list_user_roles(db, account.id)
    return UserDetail(
        **UserResponse.model_validate(account).model_dump(),
        roles=[RoleSummary.model_validate(r) for r in roles],
    )


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    user: Annotated[Principal, Depends(require_permissions("users.update"))],
    db: DbSession,
):
    account = await user_service.update_user(
        db, user_id, body, actor_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return account


@router.delete("/{user_id}", response_model=UserResponse)
async def deactivate_user(
    user_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("users.delete"))],
    db: DbSession,
):
    account = await user_service.deactivate_user(
        db, user_id, actor_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return account


@router.post("/{user_id}/roles", status_code=201)
async def assign_role(
    user_id: uuid.UUID,
    body: RoleAssign,
    user: Annotated[Principal, Depends(require_permissions("users.assign_role"))],
    db: DbSession,
):
    user_role = await user_service.assign_role(
        db, user_id, body.role_id, actor_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
    return {"user_id": str(user_role.user_id), "role_id": str(user_role.role_id)}


@router.delete("/{user_id}/roles/{role_id}", status_code=204)
async def remove_role(
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("users.remove_role"))],
    db: DbSession,
):
    await user_service.remove_role(
        db, user_id, role_id, actor_id=user.id, organization_id=user.organization_id
    )
    await db.commit()
