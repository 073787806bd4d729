import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.audit.models import AuditEventType
from agent_directory.audit.service import log_event
from agent_directory.auth.models import Role, User, UserRole
from agent_directory.auth.schemas import UserResponse
from agent_directory.core.exceptions import ConflictError, NotFoundError
from agent_directory.users.schemas import UserUpdate

logger = logging.getLogger(__name__)


async def list_users(db: AsyncSession, organization_id: uuid.UUID) -> list[User]:
    result = await db.execute(
        select(User).where(User.organization_id == organization_id).order_by(User.created_at.desc())
    )
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: uuid.UUID, organization_id: uuid.UUID) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id, User.organization_id == organization_id)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User", str(user_id))
    return user


async def list_user_roles(db: AsyncSession, user_id: uuid.UUID) -> list[Role]:
    result = await db.execute(
        select(Role)
        .join(UserRole, UserRole.role_id == Role.id)
        .where(UserRole.user_id == user_id)
        .order_by(Role.name)
    )
    return list(result.scalars().all())


async def update_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    data: UserUpdate,
    actor_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> User:
    user = await get_user(db, user_id, organization_id)
    old_values = UserResponse.model_validate(user).model_dump(mode="json")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(user, key, value)
    await db.flush()

    await log_event(
        db,
        AuditEventType.UPDATE,
        "user",
        "update",
        resource_id=user.id,
        description=f"User {user.email} updated",
        user_id=actor_id,
        old_values=old_values,
        new_values=UserResponse.model_validate(user),
    )
    return user


async def deactivate_user(
    db: AsyncSession, user_id: uuid.UUID, actor_id: uuid.UUID, organization_id: uuid.UUID
) -> User:
    """Users are never removed; deactivation blocks login and token use."""
    user = await get_user(db, user_id, organization_id)
    was_active = user.is_active
    user.is_active = False
    await db.flush()

    await log_event(
        db,
        AuditEventType.DELETE,
        "user",
        "deactivate",
        resource_id=user.id,
        description=f"User {user.email} deactivated",
        user_id=actor_id,
        old_values={"is_active": was_active},
        new_values={"is_active": False},
    )
    logger.info("User %s deactivated by %s", user.id, actor_id)
    return user


async def assign_role(
    db: AsyncSession,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    actor_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> UserRole:
    user = await get_user(db, user_id, organization_id)
    result = await db.execute(select(Role).where(Role.id == role_id))
    role = result.scalar_one_or_none()
    if role is None:
        raise NotFoundError("Role", str(role_id))

    result = await db.execute(
        select(UserRole.id).where(UserRole.user_id == user.id, UserRole.role_id == role.id)
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"User already has role '{role.name}'")

    user_role = UserRole(user_id=user.id, role_id=role.id)
    db.add(user_role)
    await db.flush()

    await log_event(
        db,
        AuditEventType.UPDATE,
        "user",
        "assign_role",
        resource_id=user.id,
        description=f"Role {role.name} assigned to {user.email}",
        user_id=actor_id,
        new_values={"role_id": role.id, "role": role.name},
    )
    return user_role


async def remove_role(
    db: AsyncSession,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    actor_id: uuid.UUID,
    organization_id: uuid.UUID,
) -> None:
    user = await get_user(db, user_id, organization_id)
    result = await db.execute(
        select(UserRole).where(UserRole.user_id == user.id, UserRole.role_id == role_id)
    )
    user_role = result.scalar_one_or_none()
    if user_role is None:
        raise NotFoundError("UserRole", str(role_id))

    await db.delete(user_role)
    await db.flush()

    await log_event(
        db,
        AuditEventType.UPDATE,
        "user",
        "remove_role",
        resource_id=user.id,
        description=f"Role removed from {user.email}",
        user_id=actor_id,
        old_values={"role_id": role_id},
    )
