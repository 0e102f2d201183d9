"""
Run executor.

Moves a composed run to Running, performs exactly one dispatch (HTTP or
SQL), and records the terminal outcome. Every state change is persisted
through the run repository.
"""

import asyncio
import logging
from typing import Protocol

from apprunner.models.contracts import ResourceDefinition, RunRecord
from apprunner.services.run_engine.http_executor import HttpExecutor
from apprunner.services.run_engine.outcomes import DispatchOutcome
from apprunner.services.run_engine.request_composer import ComposedRequest
from apprunner.services.run_engine.run_state import mark_failure, mark_running, mark_success
from apprunner.services.run_engine.sql_execution import SqlExecutionService

logger = logging.getLogger(__name__)


class RunWriter(Protocol):
    async def update(self, run: RunRecord) -> RunRecord:
        ...


class RunExecutor:
    """Dispatches composed runs. No retries: one attempt per run."""

    def __init__(
        self,
        runs: RunWriter,
        http_executor: HttpExecutor,
        sql_service: SqlExecutionService,
    ):
        self.runs = runs
        self.http_executor = http_executor
        self.sql_service = sql_service

    async def execute(
        self,
        run: RunRecord,
        resource: ResourceDefinition,
        composed: ComposedRequest,
    ) -> RunRecord:
        """
        Dispatch a pending run and return its terminal record.

        Args:
            run: Pending run, already persisted
            resource: Resource the app runs against
            composed: Resolved HTTP request or SQL query
        """
        run = await self.runs.update(
            mark_running(run, composed.http_request, composed.sql_query)
        )

        try:
            outcome = await self._dispatch(resource, composed)
        except asyncio.CancelledError:
            logger.warning(f"Run {run.id} was cancelled during dispatch")
            await self.runs.update(mark_failure(run, "Run was cancelled during dispatch"))
            raise
        except Exception as e:
            logger.exception(f"Unexpected error dispatching run {run.id}")
            outcome = DispatchOutcome.failed(f"Unexpected error during dispatch: {e}")

        if outcome.success:
            finished = mark_success(run, outcome.response or "")
        else:
            logger.warning(f"Run {run.id} failed: {outcome.error_message}")
            finished = mark_failure(
                run, outcome.error_message or "Dispatch failed", response=outcome.response
            )
        return await self.runs.update(finished)

    async def _dispatch(
        self, resource: ResourceDefinition, composed: ComposedRequest
    ) -> DispatchOutcome:
        if composed.sql_query is not None:
            return await self.sql_service.execute_query(resource, composed.sql_query)
        if composed.http_request is not None:
            return await self.http_executor.execute(composed.http_request)
        return DispatchOutcome.failed("Nothing to dispatch")
