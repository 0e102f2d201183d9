"""
Dashboard ORM model.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from apprunner.models.orm.base import Base, utcnow


class Dashboard(Base):
    """Dashboard database table."""

    __tablename__ = "dashboards"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255))
    folder_id: Mapped[UUID | None] = mapped_column(default=None)
    prepare_app_id: Mapped[UUID | None] = mapped_column(default=None)
    configuration: Mapped[dict] = mapped_column(JSONB, default=dict)  # actions + bindings

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=text("NOW()")
    )
