import uuid
from dataclasses import dataclass, field
from typing import Annotated, Awaitable, Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.auth.models import Permission, Role, RolePermission, User, UserRole
from agent_directory.core.exceptions import ForbiddenError, UnauthorizedError
from agent_directory.core.security import decode_token
from agent_directory.db.session import async_session_factory

security_scheme = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    """The authenticated caller, with its role permissions flattened to names."""
    id: uuid.UUID
    email: str
    organization_id: uuid.UUID
    roles: list[str] = field(default_factory=list)
    permissions: frozenset[str] = frozenset()

    def has_any(self, *names: str) -> bool:
        return any(name in self.permissions for name in names)


@dataclass
class ClientInfo:
    ip_address: str | None
    user_agent: str | None


async def get_db() -> AsyncSession:  # type: ignore[misc]
    async with async_session_factory() as session:
        yield session


async def load_roles_and_permissions(
    db: AsyncSession, user_id: uuid.UUID
) -> tuple[list[str], frozenset[str]]:
    roles_result = await db.execute(
        select(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .where(UserRole.user_id == user_id)
        .order_by(Role.name)
    )
    perms_result = await db.execute(
        select(Permission.name)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(UserRole, UserRole.role_id == RolePermission.role_id)
        .where(UserRole.user_id == user_id)
    )
    return list(roles_result.scalars().all()), frozenset(perms_result.scalars().all())


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Principal:
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedError("Invalid token")
    try:
        user_id = uuid.UUID(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    roles, permissions = await load_roles_and_permissions(db, user.id)
    return Principal(
        id=user.id,
        email=user.email,
        organization_id=user.organization_id,
        roles=roles,
        permissions=permissions,
    )


def require_permissions(*required: str) -> Callable[..., Awaitable[Principal]]:
    """
    Build a dependency that admits the caller when it holds ANY of `required`.
    The permission set is passed explicitly per route.
    """
    async def _check(principal: Annotated[Principal, Depends(get_current_user)]) -> Principal:
        if required and not principal.has_any(*required):
            raise ForbiddenError("Insufficient permissions for this action")
        return principal

    return _check


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[Principal, Depends(get_current_user)]
Client = Annotated[ClientInfo, Depends(get_client_info)]
