import enum
import uuid
from typing import Any

from sqlalchemy import Enum, ForeignKey, Index, Integer, JSON, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from agent_directory.db.base import Base, TimestampMixin, UUIDMixin


class ConfigurationType(str, enum.Enum):
    PROJECT = "PROJECT"
    AGENT = "AGENT"


class ConfigurationVersion(UUIDMixin, TimestampMixin, Base):
    """
    Append-only snapshot of an entity's configuration.

    For a fixed (project_id, configuration_type, entity_id) the version column
    runs 1..N with no gaps; the unique constraint rejects a second writer that
    raced to the same number.
    """
    __tablename__ = "configuration_versions"
    __table_args__ = (
        UniqueConstraint(
            "project_id", "configuration_type", "entity_id", "version",
            name="uq_configuration_version_key",
        ),
        Index("ix_configuration_versions_project_created", "project_id", "created_at"),
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("projects.id"), nullable=False
    )
    configuration_type: Mapped[ConfigurationType] = mapped_column(
        Enum(ConfigurationType), nullable=False
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[Any] = mapped_column(JSON, nullable=False)
    # Unified diff against the previous version; null for version 1
    diff: Mapped[str | None] = mapped_column(Text, nullable=True)
    changes_summary: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
