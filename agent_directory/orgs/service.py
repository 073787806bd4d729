"""Organization lookups. Organizations are created by the seed script only."""
import re
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.core.exceptions import NotFoundError
from agent_directory.orgs.models import Organization


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug[:128] or "org"


async def list_orgs(db: AsyncSession, organization_id: uuid.UUID) -> list[Organization]:
    # A caller only ever sees its own tenant
    result = await db.execute(
        select(Organization).where(Organization.id == organization_id).order_by(Organization.created_at)
    )
    return list(result.scalars().all())


async def get_org(
    db: AsyncSession, org_id: uuid.UUID, organization_id: uuid.UUID
) -> Organization:
    if org_id != organization_id:
        raise NotFoundError("Organization", str(org_id))
    result = await db.execute(select(Organization).where(Organization.id == org_id))
    org = result.scalar_one_or_none()
    if org is None:
        raise NotFoundError("Organization", str(org_id))
    return org


async def get_org_by_slug(db: AsyncSession, slug: str) -> Organization | None:
    result = await db.execute(select(Organization).where(Organization.slug == slug))
    return result.scalar_one_or_none()
