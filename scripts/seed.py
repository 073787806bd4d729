"""Seed the default organization, roles, permissions and accounts. Run with: python -m scripts.seed"""
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.auth.models import Permission, Role, RolePermission, User, UserRole
from agent_directory.auth.permissions import ADMIN_ROLE, PERMISSIONS, ROLE_PERMISSIONS, USER_ROLE
from agent_directory.core.security import hash_password
from agent_directory.db.session import async_session_factory
from agent_directory.orgs.models import Organization
from agent_directory.orgs.service import get_org_by_slug

DEFAULT_ORG_SLUG = "default"

ROLES = [
    # (name, description, is_default)
    (ADMIN_ROLE, "Full administrative access", False),
    (USER_ROLE, "Standard user", True),
]

ACCOUNTS = [
    # (email, password, first_name, last_name, role)
    ("admin@adm.com", "admin123", "Admin", "User", ADMIN_ROLE),
    ("user@adm.com", "user123", "Regular", "User", USER_ROLE),
]


async def seed_organization(db: AsyncSession) -> Organization:
    org = await get_org_by_slug(db, DEFAULT_ORG_SLUG)
    if org is None:
        org = Organization(
            name="Default Organization",
            slug=DEFAULT_ORG_SLUG,
            description="Default organization for the system",
        )
        db.add(org)
        await db.flush()
        print(f"  Added: organization {org.slug}")
    else:
        print(f"  Exists: organization {org.slug}")
    return org


async def seed_permissions(db: AsyncSession) -> dict[str, Permission]:
    permissions: dict[str, Permission] = {}
    for resource, action, description in PERMISSIONS:
        name = f"{resource}.{action}"
        result = await db.execute(select(Permission).where(Permission.name == name))
        perm = result.scalar_one_or_none()
        if perm is None:
            perm = Permission(name=name, resource=resource, action=action, description=description)
            db.add(perm)
            print(f"  Added: permission {name}")
        permissions[name] = perm
    await db.flush()
    return permissions


async def seed_roles(db: AsyncSession, permissions: dict[str, Permission]) -> dict[str, Role]:
    roles: dict[str, Role] = {}
    for name, description, is_default in ROLES:
        result = await db.execute(select(Role).where(Role.name == name))
        role = result.scalar_one_or_none()
        if role is None:
            role = Role(name=name, description=description, is_system=True, is_default=is_default)
            db.add(role)
            await db.flush()
            print(f"  Added: role {name}")
        roles[name] = role

        granted = await db.execute(
            select(RolePermission.permission_id).where(RolePermission.role_id == role.id)
        )
        existing = set(granted.scalars().all())
        for perm_name in sorted(ROLE_PERMISSIONS[name]):
            perm = permissions[perm_name]
            if perm.id not in existing:
                db.add(RolePermission(role_id=role.id, permission_id=perm.id))
    await db.flush()
    return roles


async def seed_accounts(db: AsyncSession, org: Organization, roles: dict[str, Role]) -> None:
    for email, password, first_name, last_name, role_name in ACCOUNTS:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is not None:
            print(f"  Exists: user {email}")
            continue
        user = User(
            email=email,
            hashed_password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            organization_id=org.id,
            is_active=True,
            is_verified=True,
        )
        db.add(user)
        await db.flush()
        db.add(UserRole(user_id=user.id, role_id=roles[role_name].id))
        print(f"  Added: user {email} ({role_name})")
    await db.flush()


async def seed(db: AsyncSession) -> None:
    org = await seed_organization(db)
    permissions = await seed_permissions(db)
    roles = await seed_roles(db, permissions)
    await seed_accounts(db, org, roles)


async def main() -> None:
    async with async_session_factory() as db:
        await seed(db)
        await db.commit()
    print("Seeding complete.")


if __name__ == "__main__":
    asyncio.run(main())
