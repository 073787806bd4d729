from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agent_directory.db.base import Base, TimestampMixin, UpdatedAtMixin, UUIDMixin


class Organization(UUIDMixin, TimestampMixin, UpdatedAtMixin, Base):
    """Tenant boundary: every other entity belongs to exactly one organization."""
    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
