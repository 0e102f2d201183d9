"""
App ORM model.

Runnable request definitions over a resource. Inputs, key/value lists and
SQL configuration are stored as structured JSONB.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Enum as SQLAlchemyEnum, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from apprunner.models.enums import HttpMethod
from apprunner.models.orm.base import Base, utcnow


class App(Base):
    """App database table."""

    __tablename__ = "apps"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255))
    folder_id: Mapped[UUID | None] = mapped_column(default=None)
    # No FK to resources: a run reports a missing resource as InvalidConfiguration
    resource_id: Mapped[UUID] = mapped_column()
    http_method: Mapped[HttpMethod] = mapped_column(
        SQLAlchemyEnum(
            HttpMethod,
            name="http_method",
            create_type=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=HttpMethod.GET,
    )
    inputs: Mapped[list] = mapped_column(JSONB, default=list)
    url_path: Mapped[str | None] = mapped_column(String(2000), default=None)
    url_parameters: Mapped[list] = mapped_column(JSONB, default=list)
    headers: Mapped[list] = mapped_column(JSONB, default=list)
    body: Mapped[list] = mapped_column(JSONB, default=list)
    use_dynamic_json_body: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    sql_config: Mapped[dict | None] = mapped_column(JSONB, default=None)
    description: Mapped[str | None] = mapped_column(Text, default=None)

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=text("NOW()")
    )

    __table_args__ = (
        Index("ix_apps_resource_id", "resource_id"),
        Index("ix_apps_folder_id", "folder_id"),
    )
