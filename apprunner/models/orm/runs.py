"""
Run ORM model.

One row per execution attempt of an app. ``version`` is the optimistic
concurrency token: an UPDATE that matches no row at the expected version
raises StaleDataError.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Enum as SQLAlchemyEnum, Index, Integer, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from apprunner.models.enums import RunStatus
from apprunner.models.orm.base import Base, utcnow


class Run(Base):
    """Run database table."""

    __tablename__ = "runs"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    app_id: Mapped[UUID] = mapped_column()
    status: Mapped[RunStatus] = mapped_column(
        SQLAlchemyEnum(
            RunStatus,
            name="run_status",
            create_type=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=RunStatus.PENDING,
    )
    input_values: Mapped[list] = mapped_column(JSONB, default=list)
    executable_request: Mapped[dict | None] = mapped_column(JSONB, default=None)
    executed_sql: Mapped[dict | None] = mapped_column(JSONB, default=None)
    response: Mapped[str | None] = mapped_column(Text, default=None)
    error_message: Mapped[str | None] = mapped_column(Text, default=None)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=text("NOW()")
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": lambda v: (v or 0) + 1,
    }

    __table_args__ = (
        Index("ix_runs_app_id_status", "app_id", "status"),
        Index("ix_runs_status", "status"),
        Index("ix_runs_created_at", "created_at"),
    )
