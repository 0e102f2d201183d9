"""
Shared execution context for command handlers.

Holds the repositories and dispatch services a handler needs. Built once
per unit of work (usually per database session) and never mutated.
"""

from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from apprunner.config import Settings, get_settings
from apprunner.core.exceptions import ValidationError
from apprunner.repositories import (
    AppRepository,
    DashboardRepository,
    ResourceRepository,
    RunRepository,
)
from apprunner.services.run_engine import (
    HttpExecutor,
    PostgresSqlExecutionService,
    RequestComposer,
    SqlExecutionService,
)


@dataclass(frozen=True)
class HandlerContext:
    apps: AppRepository
    resources: ResourceRepository
    runs: RunRepository
    dashboards: DashboardRepository
    http_executor: HttpExecutor
    sql_service: SqlExecutionService
    settings: Settings
    composer: RequestComposer = field(default_factory=RequestComposer)

    @classmethod
    def from_session(
        cls, session: AsyncSession, settings: Settings | None = None
    ) -> "HandlerContext":
        """Wire SQLAlchemy repositories and default executors for one session."""
        settings = settings or get_settings()
        return cls(
            apps=AppRepository(session),
            resources=ResourceRepository(session),
            runs=RunRepository(session),
            dashboards=DashboardRepository(session),
            http_executor=HttpExecutor(timeout_seconds=settings.http_timeout_seconds),
            sql_service=PostgresSqlExecutionService(
                timeout_seconds=settings.sql_timeout_seconds,
                max_rows=settings.sql_max_rows,
            ),
            settings=settings,
        )


def parse_id(value: str, label: str) -> UUID:
    """
    Parse a GUID-shaped identifier.

    Raises:
        ValidationError: "Invalid <label> ID format"
    """
    try:
        return UUID(value.strip())
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid {label} ID format") from None


def validate_pagination(skip: int, take: int, max_take: int) -> None:
    if skip < 0:
        raise ValidationError("Skip cannot be negative")
    if take < 1 or take > max_take:
        raise ValidationError(f"Take must be between 1 and {max_take}")
