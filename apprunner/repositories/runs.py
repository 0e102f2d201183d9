"""
Run Repository

Database operations for runs. Every read excludes soft-deleted rows; updates
are guarded by the ``version`` column so concurrent writers to the same run
get a ConflictError instead of silently overwriting each other.
"""

import logging
from uuid import UUID

from sqlalchemy import ColumnElement, desc, func, select
from sqlalchemy.orm.exc import StaleDataError

from apprunner.core.exceptions import ConflictError, NotFoundError
from apprunner.models import (
    ExecutableHttpRequest,
    Run,
    RunInputValue,
    RunRecord,
    SqlQuery,
)
from apprunner.models.enums import RunStatus
from apprunner.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class RunRepository(BaseRepository[Run]):
    """Repository for run operations."""

    model = Run

    # =========================================================================
    # Create / Update Operations
    # =========================================================================

    async def add(self, run: RunRecord) -> RunRecord:
        """
        Insert a new run.

        The stored version is assigned by the mapper; callers must use the
        returned record for subsequent updates.
        """
        row = Run(
            id=run.id,
            app_id=run.app_id,
            status=run.status,
            created_at=run.created_at,
        )
        self._apply(row, run)
        row = await self.create(row)
        logger.debug(f"Inserted run {run.id} for app {run.app_id}")
        return self._to_pydantic(row)

    async def update(self, run: RunRecord) -> RunRecord:
        """
        Persist changes to an existing run.

        Raises:
            NotFoundError: If the run does not exist
            ConflictError: If the run was modified since ``run.version`` was read
        """
        row = await self.get_row(run.id)
        if row is None or row.is_deleted:
            raise NotFoundError(f"Run {run.id} not found")
        if row.version != run.version:
            raise ConflictError(
                f"Run {run.id} was modified concurrently "
                f"(expected version {run.version}, found {row.version})"
            )

        row.status = run.status
        self._apply(row, run)
        try:
            await self.session.flush()
        except StaleDataError as e:
            raise ConflictError(f"Run {run.id} was modified concurrently") from e
        return self._to_pydantic(row)

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get_by_id(self, run_id: UUID) -> RunRecord | None:
        """Get a non-deleted run by ID."""
        result = await self.session.execute(
            select(Run).where(Run.id == run_id, Run.is_deleted.is_(False))
        )
        row = result.scalar_one_or_none()
        return self._to_pydantic(row) if row else None

    async def get_by_app_id(
        self, app_id: UUID, skip: int, take: int
    ) -> tuple[list[RunRecord], int]:
        """List runs of an app, newest first, with the unpaginated count."""
        return await self._page([Run.app_id == app_id], skip, take)

    async def get_by_status(
        self, status: RunStatus, skip: int, take: int
    ) -> tuple[list[RunRecord], int]:
        """List runs in a status, newest first, with the unpaginated count."""
        return await self._page([Run.status == status], skip, take)

    async def get_by_app_id_and_status(
        self, app_id: UUID, status: RunStatus, skip: int, take: int
    ) -> tuple[list[RunRecord], int]:
        """List runs of an app in a status, newest first, with the unpaginated count."""
        return await self._page([Run.app_id == app_id, Run.status == status], skip, take)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _page(
        self, conditions: list[ColumnElement[bool]], skip: int, take: int
    ) -> tuple[list[RunRecord], int]:
        conditions = [*conditions, Run.is_deleted.is_(False)]

        count_result = await self.session.execute(
            select(func.count(Run.id)).where(*conditions)
        )
        total = count_result.scalar_one()

        query = (
            select(Run)
            .where(*conditions)
            .order_by(desc(Run.created_at), Run.id)
            .offset(skip)
            .limit(take)
        )
        result = await self.session.execute(query)
        return [self._to_pydantic(r) for r in result.scalars().all()], total

    @staticmethod
    def _apply(row: Run, run: RunRecord) -> None:
        """Copy mutable run fields onto the ORM row."""
        row.input_values = [v.model_dump(mode="json") for v in run.input_values]
        row.executable_request = (
            run.executable_request.model_dump(mode="json")
            if run.executable_request else None
        )
        row.executed_sql = run.executed_sql.model_dump(mode="json") if run.executed_sql else None
        row.response = run.response
        row.error_message = run.error_message
        row.started_at = run.started_at
        row.completed_at = run.completed_at

    def _to_pydantic(self, row: Run) -> RunRecord:
        """Convert SQLAlchemy model to Pydantic model."""
        return RunRecord(
            id=row.id,
            app_id=row.app_id,
            status=RunStatus(row.status),
            input_values=[RunInputValue.model_validate(v) for v in row.input_values or []],
            executable_request=(
                ExecutableHttpRequest.model_validate(row.executable_request)
                if row.executable_request else None
            ),
            executed_sql=SqlQuery.model_validate(row.executed_sql) if row.executed_sql else None,
            response=row.response,
            error_message=row.error_message,
            started_at=row.started_at,
            completed_at=row.completed_at,
            created_at=row.created_at,
            version=row.version,
            is_deleted=row.is_deleted,
        )
