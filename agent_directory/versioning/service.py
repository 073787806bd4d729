"""
Configuration versioning: append-only, diffable snapshots.

Rules:
- NEVER update or delete a version row.
- Version numbers per (project_id, configuration_type, entity_id) are 1..N, no gaps.
- The next number is MAX(version) + 1; the unique constraint turns a concurrent
  writer's duplicate into an IntegrityError, which is retried from a fresh read.
- Restoring is additive: it appends a new version carrying the old content.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agent_directory.config import settings
from agent_directory.core.exceptions import NotFoundError, VersionConflictError
from agent_directory.versioning.diffing import canonicalize, unified_diff
from agent_directory.versioning.models import ConfigurationType, ConfigurationVersion

logger = logging.getLogger(__name__)


@dataclass
class VersionComparison:
    version1: ConfigurationVersion
    version2: ConfigurationVersion
    diff: str


async def _latest_version(
    db: AsyncSession,
    project_id: uuid.UUID,
    configuration_type: ConfigurationType,
    entity_id: uuid.UUID,
) -> ConfigurationVersion | None:
    result = await db.execute(
        select(ConfigurationVersion)
        .where(
            ConfigurationVersion.project_id == project_id,
            ConfigurationVersion.configuration_type == configuration_type,
            ConfigurationVersion.entity_id == entity_id,
        )
        .order_by(ConfigurationVersion.version.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _version_taken(
    db: AsyncSession,
    project_id: uuid.UUID,
    configuration_type: ConfigurationType,
    entity_id: uuid.UUID,
    version: int,
) -> bool:
    result = await db.execute(
        select(ConfigurationVersion.id).where(
            ConfigurationVersion.project_id == project_id,
            ConfigurationVersion.configuration_type == configuration_type,
            ConfigurationVersion.entity_id == entity_id,
            ConfigurationVersion.version == version,
        )
    )
    return result.first() is not None


async def create_version(
    db: AsyncSession,
    project_id: uuid.UUID,
    configuration_type: ConfigurationType,
    entity_id: uuid.UUID,
    content: Any,
    created_by: uuid.UUID,
    changes_summary: str | None = None,
) -> ConfigurationVersion:
    """
    Append the next version for the entity.
    Raises SerializationError if content is not plain JSON,
    VersionConflictError if every insert attempt collided on the version number;
    any other IntegrityError (e.g. an unknown created_by) is re-raised.
    Must be called within a transaction (the caller should commit).
    """
    canonicalize(content)

    attempts = max(1, settings.version_insert_attempts)
    for attempt in range(1, attempts + 1):
        previous = await _latest_version(db, project_id, configuration_type, entity_id)
        record = ConfigurationVersion(
            project_id=project_id,
            configuration_type=configuration_type,
            entity_id=entity_id,
            version=previous.version + 1 if previous is not None else 1,
            content=content,
            diff=unified_diff(previous.content, content) if previous is not None else None,
            changes_summary=changes_summary,
            created_by=created_by,
        )
        try:
            async with db.begin_nested():
                db.add(record)
                await db.flush()
        except IntegrityError:
            # Anything other than a lost race on the version number propagates
            if not await _version_taken(
                db, project_id, configuration_type, entity_id, record.version
            ):
                raise
            logger.warning(
                "Version %s of %s %s already taken (attempt %d/%d)",
                record.version, configuration_type.value, entity_id, attempt, attempts,
            )
            continue
        return record

    raise VersionConflictError(str(entity_id), attempts)


async def get_version_history(
    db: AsyncSession,
    project_id: uuid.UUID,
    entity_id: uuid.UUID | None = None,
) -> list[ConfigurationVersion]:
    q = select(ConfigurationVersion).where(ConfigurationVersion.project_id == project_id)
    if entity_id is not None:
        q = q.where(ConfigurationVersion.entity_id == entity_id)
    q = q.order_by(ConfigurationVersion.created_at.desc(), ConfigurationVersion.version.desc())
    result = await db.execute(q)
    return list(result.scalars().all())


async def get_version(db: AsyncSession, version_id: uuid.UUID) -> ConfigurationVersion:
    result = await db.execute(
        select(ConfigurationVersion).where(ConfigurationVersion.id == version_id)
    )
    version = result.scalar_one_or_none()
    if version is None:
        raise NotFoundError("ConfigurationVersion", str(version_id))
    return version


async def compare_versions(
    db: AsyncSession, version_id_1: uuid.UUID, version_id_2: uuid.UUID
) -> VersionComparison:
    """Fresh diff from version 1's content to version 2's, ignoring stored diffs."""
    version1 = await get_version(db, version_id_1)
    version2 = await get_version(db, version_id_2)
    return VersionComparison(
        version1=version1,
        version2=version2,
        diff=unified_diff(version1.content, version2.content),
    )


async def restore_version(
    db: AsyncSession, version_id: uuid.UUID, user_id: uuid.UUID
) -> ConfigurationVersion:
    target = await get_version(db, version_id)
    restored = await create_version(
        db,
        project_id=target.project_id,
        configuration_type=target.configuration_type,
        entity_id=target.entity_id,
        content=target.content,
        created_by=user_id,
        changes_summary=f"Restored to version {target.version}",
    )
    logger.info(
        "Restored %s %s to version %d as version %d (user %s)",
        target.configuration_type.value, target.entity_id, target.version, restored.version, user_id,
    )
    return restored
