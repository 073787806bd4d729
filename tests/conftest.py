"""
Test fixtures using async SQLite for fast, isolated tests.
No PostgreSQL required for unit tests.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")

from contextlib import asynccontextmanager  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from agent_directory.db.base import Base  # noqa: E402
# Every model must be imported so Base.metadata knows all tables
from agent_directory.agents.models import Agent  # noqa: E402,F401
from agent_directory.audit.models import AuditLog  # noqa: E402,F401
from agent_directory.auth.models import Permission, Role, RolePermission, User, UserRole  # noqa: E402,F401
from agent_directory.auth.permissions import ALL_PERMISSION_NAMES  # noqa: E402
from agent_directory.core.dependencies import Principal, get_current_user, get_db  # noqa: E402
from agent_directory.core.security import hash_password  # noqa: E402
from agent_directory.main import app  # noqa: E402
from agent_directory.orgs.models import Organization  # noqa: E402
from agent_directory.platforms.models import Platform  # noqa: E402,F401
from agent_directory.projects.models import Project, ProjectMember, ProjectMemberRole  # noqa: E402
from agent_directory.tags.models import Tag  # noqa: E402,F401
from agent_directory.technologies.models import Technology  # noqa: E402,F401
from agent_directory.templates.models import Template  # noqa: E402,F401
from agent_directory.versioning.models import ConfigurationVersion  # noqa: E402,F401


@pytest_asyncio.fixture
async def db():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    await engine.dispose()


async def make_org(db: AsyncSession, slug: str = "acme") -> Organization:
    org = Organization(name=slug.title(), slug=slug)
    db.add(org)
    await db.flush()
    return org


async def make_user(
    db: AsyncSession, org: Organization, email: str, password: str = "password"
) -> User:
    user = User(
        organization_id=org.id,
        email=email,
        hashed_password=hash_password(password),
    )
    db.add(user)
    await db.flush()
    return user


async def make_project(
    db: AsyncSession, org: Organization, owner: User, slug: str = "directory"
) -> Project:
    project = Project(organization_id=org.id, owner_id=owner.id, name=slug.title(), slug=slug)
    db.add(project)
    await db.flush()
    db.add(ProjectMember(project_id=project.id, user_id=owner.id, role=ProjectMemberRole.OWNER))
    await db.flush()
    return project


def principal_for(user: User, permissions=ALL_PERMISSION_NAMES) -> Principal:
    return Principal(
        id=user.id,
        email=user.email,
        organization_id=user.organization_id,
        roles=["Admin"],
        permissions=frozenset(permissions),
    )


@asynccontextmanager
async def api_client(db: AsyncSession, principal: Principal | None = None):
    """HTTP client bound to the test session, optionally authenticated as `principal`."""
    async def _get_db():
        yield db

    async def _get_user():
        return principal

    app.dependency_overrides[get_db] = _get_db
    if principal is not None:
        app.dependency_overrides[get_current_user] = _get_user
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def tenant(db: AsyncSession):
    """An organization with an owner and one project, committed."""
    org = await make_org(db)
    owner = await make_user(db, org, "owner@acme.com")
    project = await make_project(db, org, owner)
    await db.commit()
    return org, owner, project


@pytest_asyncio.fixture
async def other_tenant(db: AsyncSession):
    org = await make_org(db, "globex")
    owner = await make_user(db, org, "owner@globex.com")
    project = await make_project(db, org, owner, slug="rival")
    await db.commit()
    return org, owner, project
