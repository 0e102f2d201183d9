"""
Resource ORM model.

Shared HTTP or database connection templates that apps are built on.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from apprunner.models.orm.base import Base, utcnow


class Resource(Base):
    """Resource database table."""

    __tablename__ = "resources"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255))
    space_id: Mapped[UUID | None] = mapped_column(default=None)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    kind: Mapped[str] = mapped_column(String(20), default="http", server_default="http")

    base_url: Mapped[str | None] = mapped_column(String(2000), default=None)
    url_parameters: Mapped[list] = mapped_column(JSONB, default=list)
    headers: Mapped[list] = mapped_column(JSONB, default=list)
    body: Mapped[list] = mapped_column(JSONB, default=list)

    # Database connection fields (kind == "sql")
    database_engine: Mapped[str | None] = mapped_column(String(50), default=None)
    database_host: Mapped[str | None] = mapped_column(String(255), default=None)
    database_port: Mapped[int | None] = mapped_column(Integer, default=None)
    database_name: Mapped[str | None] = mapped_column(String(255), default=None)
    database_auth_scheme: Mapped[str | None] = mapped_column(String(50), default=None)
    database_username: Mapped[str | None] = mapped_column(String(255), default=None)
    database_password: Mapped[str | None] = mapped_column(Text, default=None)
    use_ssl: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    connection_options: Mapped[list] = mapped_column(JSONB, default=list)
    sql_schema: Mapped[dict] = mapped_column(JSONB, default=dict)  # {table: [columns]}

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=text("NOW()")
    )
