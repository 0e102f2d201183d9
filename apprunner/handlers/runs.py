"""
Run command handlers.

CreateRun drives the whole pipeline:

    validate inputs -> persist Pending run -> load resource -> compose
    -> Running -> dispatch -> Success | Failure

Caller mistakes (bad IDs, missing or mistyped inputs) and missing apps are
raised before anything is persisted. A missing resource or a composition
defect is recorded on the run as InvalidConfiguration.
"""

import logging
from datetime import datetime, timezone
from uuid import uuid4

from apprunner.core.exceptions import NotFoundError
from apprunner.handlers.commands import (
    CreateRun,
    GetRunById,
    GetRunsByAppId,
    GetRunsByAppIdAndStatus,
    GetRunsByStatus,
)
from apprunner.handlers.context import HandlerContext, parse_id, validate_pagination
from apprunner.models.contracts import PagedResult, RunRecord
from apprunner.models.enums import RunStatus
from apprunner.services.run_engine import (
    CompositionError,
    RunExecutor,
    apply_default_values,
    check_input_types,
    parse_run_status,
    validate_inputs,
)
from apprunner.services.run_engine.run_state import mark_invalid_configuration

logger = logging.getLogger(__name__)

RESOURCE_NOT_FOUND_MESSAGE = "Associated resource not found"


class CreateRunHandler:
    """Creates and executes one run of an app."""

    def __init__(self, context: HandlerContext):
        self.context = context

    async def handle(self, command: CreateRun) -> RunRecord:
        """
        Returns:
            The terminal run record (Success, Failure or InvalidConfiguration)

        Raises:
            ValidationError: Malformed app ID or bad input values
            NotFoundError: App does not exist
        """
        ctx = self.context
        app_id = parse_id(command.app_id, "app")

        app = await ctx.apps.get_by_id(app_id)
        if app is None:
            raise NotFoundError("App not found")

        submitted = command.request.input_values
        validate_inputs(app.inputs, submitted)
        input_values = apply_default_values(app.inputs, submitted)
        check_input_types(app.inputs, input_values)

        run = await ctx.runs.add(
            RunRecord(
                id=uuid4(),
                app_id=app.id,
                status=RunStatus.PENDING,
                input_values=input_values,
                created_at=datetime.now(timezone.utc),
            )
        )
        logger.info(f"Created run {run.id} for app {app.id} by user {command.actor_user_id}")

        resource = await ctx.resources.get_by_id(app.resource_id)
        if resource is None:
            logger.warning(f"Run {run.id}: resource {app.resource_id} of app {app.id} not found")
            return await ctx.runs.update(
                mark_invalid_configuration(run, RESOURCE_NOT_FOUND_MESSAGE)
            )

        try:
            composed = ctx.composer.compose(
                app,
                resource,
                input_values,
                current_user=command.current_user,
                dynamic_body=command.request.dynamic_body,
            )
        except CompositionError as e:
            logger.warning(f"Run {run.id}: composition failed: {e}")
            return await ctx.runs.update(mark_invalid_configuration(run, str(e)))

        executor = RunExecutor(ctx.runs, ctx.http_executor, ctx.sql_service)
        return await executor.execute(run, resource, composed)


class GetRunByIdHandler:
    def __init__(self, context: HandlerContext):
        self.context = context

    async def handle(self, command: GetRunById) -> RunRecord:
        run_id = parse_id(command.run_id, "run")
        run = await self.context.runs.get_by_id(run_id)
        if run is None:
            raise NotFoundError("Run not found")
        return run


class GetRunsByAppIdHandler:
    def __init__(self, context: HandlerContext):
        self.context = context

    async def handle(self, command: GetRunsByAppId) -> PagedResult[RunRecord]:
        app_id = parse_id(command.app_id, "app")
        validate_pagination(command.skip, command.take, self.context.settings.max_page_size)

        items, total = await self.context.runs.get_by_app_id(app_id, command.skip, command.take)
        return PagedResult[RunRecord](
            items=items, total_count=total, skip=command.skip, take=command.take
        )


class GetRunsByStatusHandler:
    def __init__(self, context: HandlerContext):
        self.context = context

    async def handle(self, command: GetRunsByStatus) -> PagedResult[RunRecord]:
        status = parse_run_status(command.status)
        validate_pagination(command.skip, command.take, self.context.settings.max_page_size)

        items, total = await self.context.runs.get_by_status(status, command.skip, command.take)
        return PagedResult[RunRecord](
            items=items, total_count=total, skip=command.skip, take=command.take
        )


class GetRunsByAppIdAndStatusHandler:
    def __init__(self, context: HandlerContext):
        self.context = context

    async def handle(self, command: GetRunsByAppIdAndStatus) -> PagedResult[RunRecord]:
        app_id = parse_id(command.app_id, "app")
        status = parse_run_status(command.status)
        validate_pagination(command.skip, command.take, self.context.settings.max_page_size)

        items, total = await self.context.runs.get_by_app_id_and_status(
            app_id, status, command.skip, command.take
        )
        return PagedResult[RunRecord](
            items=items, total_count=total, skip=command.skip, take=command.take
        )
