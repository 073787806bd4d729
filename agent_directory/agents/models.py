import uuid
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from agent_directory.db.base import Base, SoftDeleteMixin, TimestampMixin, UpdatedAtMixin, UUIDMixin


class Agent(UUIDMixin, TimestampMixin, UpdatedAtMixin, SoftDeleteMixin, Base):
    __tablename__ = "agents"
    __table_args__ = (
        Index("ix_agents_project_id", "project_id"),
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("projects.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Free-form settings document; updates are shallow-merged into it
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
