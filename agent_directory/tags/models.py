import uuid

from sqlalchemy import Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from agent_directory.db.base import Base, SoftDeleteMixin, TimestampMixin, UpdatedAtMixin, UUIDMixin


class Tag(UUIDMixin, TimestampMixin, UpdatedAtMixin, SoftDeleteMixin, Base):
    # Name uniqueness is enforced per organization among live tags only,
    # so a deleted tag's name can be reused.
    __tablename__ = "tags"

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
