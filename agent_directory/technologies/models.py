import uuid

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from agent_directory.db.base import Base, SoftDeleteMixin, TimestampMixin, UpdatedAtMixin, UUIDMixin


class Technology(UUIDMixin, TimestampMixin, UpdatedAtMixin, SoftDeleteMixin, Base):
    __tablename__ = "technologies"

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # e.g. "framework", "database", "llm"
    type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
