import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.audit.models import AuditEventType
from agent_directory.audit.service import log_event
from agent_directory.auth.models import Role, User, UserRole
from agent_directory.auth.schemas import RegisterRequest, TokenResponse
from agent_directory.core.exceptions import ConflictError, UnauthorizedError
from agent_directory.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from agent_directory.db.base import utcnow
from agent_directory.orgs.models import Organization

logger = structlog.get_logger(__name__)


def issue_tokens(user: User) -> TokenResponse:
    claims = {"email": user.email, "organization_id": str(user.organization_id)}
    return TokenResponse(
        access_token=create_access_token(str(user.id), claims),
        refresh_token=create_refresh_token(str(user.id), claims),
    )


async def register_user(
    db: AsyncSession, data: RegisterRequest, ip_address: str | None = None
) -> tuple[User, TokenResponse]:
    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Email already registered")

    result = await db.execute(select(Organization).where(Organization.id == data.organization_id))
    org = result.scalar_one_or_none()
    if org is None or not org.is_active:
        raise UnauthorizedError("Invalid or inactive organization")

    user = User(
        email=data.email,
        hashed_password=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        organization_id=org.id,
        is_active=True,
        is_verified=False,
    )
    db.add(user)
    await db.flush()

    result = await db.execute(select(Role).where(Role.is_default == True))  # noqa: E712
    default_role = result.scalars().first()
    if default_role is not None:
        db.add(UserRole(user_id=user.id, role_id=default_role.id))
        await db.flush()

    await log_event(
        db,
        AuditEventType.CREATE,
        "user",
        "register",
        resource_id=user.id,
        description=f"User {user.email} registered",
        user_id=user.id,
        ip_address=ip_address,
    )
    logger.info("user_registered", user_id=str(user.id), organization_id=str(org.id))
    return user, issue_tokens(user)


async def authenticate_user(
    db: AsyncSession,
    email: str,
    password: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> tuple[User, TokenResponse]:
    """
    Returns the user and a fresh token pair or raises.
    A failed attempt is audited and committed before the 401 propagates.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if (
        user is None
        or not user.is_active
        or user.hashed_password is None
        or not verify_password(password, user.hashed_password)
    ):
        await log_event(
            db,
            AuditEventType.AUTH_FAILED,
            "user",
            "login",
            description=f"Failed login attempt for {email}",
            ip_address=ip_address,
            user_agent=user_agent,
        )
        await db.commit()
        logger.warning("login_failed", email=email, ip_address=ip_address)
        raise UnauthorizedError("Invalid credentials")

    user.last_login_at = utcnow()
    await db.flush()

    await log_event(
        db,
        AuditEventType.AUTH_LOGIN,
        "user",
        "login",
        resource_id=user.id,
        description=f"User {user.email} logged in",
        user_id=user.id,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return user, issue_tokens(user)


async def refresh_tokens(db: AsyncSession, refresh_token: str) -> tuple[User, TokenResponse]:
    payload = decode_token(refresh_token, token_type=REFRESH_TOKEN)
    if payload is None:
        raise UnauthorizedError("Invalid token")
    try:
        user_id = uuid.UUID(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise UnauthorizedError("Invalid token")
    return user, issue_tokens(user)


async def logout(db: AsyncSession, user_id: uuid.UUID, ip_address: str | None = None) -> None:
    # Tokens are stateless; logging out only leaves an audit trail
    await log_event(
        db,
        AuditEventType.AUTH_LOGOUT,
        "user",
        "logout",
        resource_id=user_id,
        description="User logged out",
        user_id=user_id,
        ip_address=ip_address,
    )


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise UnauthorizedError("User not found or inactive")
    return user
