import uuid
from typing import Any

from sqlalchemy import JSON, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from agent_directory.db.base import Base, SoftDeleteMixin, TimestampMixin, UpdatedAtMixin, UUIDMixin


class Platform(UUIDMixin, TimestampMixin, UpdatedAtMixin, SoftDeleteMixin, Base):
    """Deployment target (a cloud or hosting provider) agents can be shipped to."""
    __tablename__ = "platforms"

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
