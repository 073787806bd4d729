"""The seed script must be safe to run repeatedly."""
import pytest
from sqlalchemy import func, select

from agent_directory.auth.models import Permission, Role, RolePermission, User, UserRole
from agent_directory.auth.permissions import ALL_PERMISSION_NAMES, PERMISSIONS
from agent_directory.core.security import verify_password
from agent_directory.orgs.service import get_org_by_slug
from scripts.seed import seed


async def _count(db, column) -> int:
    return int((await db.execute(select(func.count(column)))).scalar_one())


@pytest.mark.asyncio
async def test_seed_is_idempotent(db):
    await seed(db)
    await db.commit()
    await seed(db)
    await db.commit()

    assert await _count(db, Permission.id) == len(PERMISSIONS)
    assert await _count(db, Role.id) == 2
    assert await _count(db, User.id) == 2
    assert await _count(db, UserRole.id) == 2

    org = await get_org_by_slug(db, "default")
    assert org is not None

    admin = (await db.execute(select(User).where(User.email == "admin@adm.com"))).scalar_one()
    assert admin.organization_id == org.id
    assert verify_password("admin123", admin.hashed_password)

    admin_role = (await db.execute(select(Role).where(Role.name == "Admin"))).scalar_one()
    granted = await db.execute(
        select(func.count(RolePermission.id)).where(RolePermission.role_id == admin_role.id)
    )
    assert granted.scalar_one() == len(ALL_PERMISSION_NAMES)

    default_roles = (await db.execute(select(Role.name).where(Role.is_default == True))).scalars().all()  # noqa: E712
    assert default_roles == ["User"]
