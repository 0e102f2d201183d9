"""
Dashboard command handlers.

A dashboard chains at most two runs: an optional prepare run that gathers
context, then one action run whose inputs may be bound to fields of the
prepare run's response. Both runs go through CreateRunHandler.

Runtime events (prepared, prepare failed, action executed, action failed)
are written to the log.
"""

import logging
from uuid import UUID

from apprunner.core.auth import CurrentUser
from apprunner.core.exceptions import (
    DomainError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from apprunner.handlers.commands import CreateRun, PrepareDashboard, RunDashboardAction
from apprunner.handlers.context import HandlerContext, parse_id
from apprunner.handlers.runs import CreateRunHandler
from apprunner.models.contracts import (
    CreateRunRequest,
    DashboardActionResult,
    DashboardDefinition,
    DashboardPrepareResult,
    RunInputValue,
    RunRecord,
)
from apprunner.models.enums import RunStatus
from apprunner.services.dashboard_runtime import build_run_inputs, parse_runtime_config

logger = logging.getLogger(__name__)


async def _load_dashboard(context: HandlerContext, dashboard_id: str) -> DashboardDefinition:
    dashboard = await context.dashboards.get_by_id(parse_id(dashboard_id, "dashboard"))
    if dashboard is None:
        raise NotFoundError("Dashboard not found")
    return dashboard


async def _execute_run(
    context: HandlerContext,
    actor_user_id: str,
    app_id: UUID,
    current_user: CurrentUser,
    inputs: list[RunInputValue],
) -> RunRecord:
    return await CreateRunHandler(context).handle(
        CreateRun(
            actor_user_id=actor_user_id,
            app_id=str(app_id),
            current_user=current_user,
            request=CreateRunRequest(input_values=inputs),
        )
    )


class PrepareDashboardHandler:
    """Runs a dashboard's prepare app."""

    def __init__(self, context: HandlerContext):
        self.context = context

    async def handle(self, command: PrepareDashboard) -> DashboardPrepareResult:
        """
        Raises:
            ValidationError: Malformed ID, bad configuration or inputs
            NotFoundError: Dashboard or prepare app does not exist
            InvalidOperationError: No prepare app configured, or the
                prepare run did not succeed (the run is still persisted)
        """
        dashboard = await _load_dashboard(self.context, command.dashboard_id)
        if dashboard.prepare_app_id is None:
            raise InvalidOperationError("Dashboard is not configured with a prepare app")

        config = parse_runtime_config(dashboard.configuration)
        inputs = build_run_inputs(
            config,
            dashboard.prepare_app_id,
            None,
            command.request.load_inputs,
            [],
            None,
        )

        try:
            run = await _execute_run(
                self.context,
                command.actor_user_id,
                dashboard.prepare_app_id,
                command.current_user,
                inputs,
            )
        except DomainError as e:
            logger.warning(
                f"Dashboard {dashboard.id} prepare failed "
                f"(app {dashboard.prepare_app_id}, actor {command.actor_user_id}): {e.message}"
            )
            raise

        if run.status != RunStatus.SUCCESS:
            message = run.error_message or f"Prepare run ended with status {run.status.value}"
            logger.warning(
                f"Dashboard {dashboard.id} prepare failed "
                f"(app {dashboard.prepare_app_id}, actor {command.actor_user_id}): {message}"
            )
            raise InvalidOperationError(message)

        logger.info(
            f"Dashboard {dashboard.id} prepared by {command.actor_user_id}: "
            f"app {dashboard.prepare_app_id}, run {run.id}"
        )
        return DashboardPrepareResult(
            prepare_run_id=run.id,
            status=run.status,
            response=run.response,
            error_message=run.error_message,
        )


class RunDashboardActionHandler:
    """Runs one dashboard action, wiring inputs from the prepare run."""

    def __init__(self, context: HandlerContext):
        self.context = context

    async def handle(self, command: RunDashboardAction) -> DashboardActionResult:
        """
        Checks run in order: prior action runs, dashboard, prepare run,
        action lookup, bindings. Everything up to the action run itself
        fails without persisting anything.

        Raises:
            ValidationError: Prior action runs given, prepare run missing,
                unrelated or unsuccessful, bad configuration or bindings
            NotFoundError: Dashboard, prepare run or action does not exist
        """
        request = command.request
        if any(run_id.strip() for run_id in request.prior_action_run_ids or []):
            raise ValidationError("priorActionRunIds are not supported in dashboard runtime v1")

        dashboard = await _load_dashboard(self.context, command.dashboard_id)
        prepare_response = await self._prepare_response(dashboard, request.prepare_run_id)

        config = parse_runtime_config(dashboard.configuration)
        action = config.find_action(command.action_id)
        if action is None:
            raise NotFoundError(f"Dashboard action '{command.action_id}' was not found")

        inputs = build_run_inputs(
            config,
            action.app_id,
            action.id,
            request.load_inputs,
            request.action_inputs,
            prepare_response,
        )

        try:
            run = await _execute_run(
                self.context,
                command.actor_user_id,
                action.app_id,
                command.current_user,
                inputs,
            )
        except DomainError as e:
            logger.warning(
                f"Dashboard {dashboard.id} action '{action.id}' failed "
                f"(app {action.app_id}, actor {command.actor_user_id}): {e.message}"
            )
            raise

        if run.status == RunStatus.SUCCESS:
            logger.info(
                f"Dashboard {dashboard.id} action '{action.id}' executed by "
                f"{command.actor_user_id}: app {action.app_id}, run {run.id}"
            )
        else:
            message = run.error_message or f"Action run ended with status {run.status.value}"
            logger.warning(
                f"Dashboard {dashboard.id} action '{action.id}' failed "
                f"(app {action.app_id}, actor {command.actor_user_id}): {message}"
            )

        return DashboardActionResult(
            action_run_id=run.id,
            status=run.status,
            response=run.response,
            error_message=run.error_message,
        )

    async def _prepare_response(
        self, dashboard: DashboardDefinition, prepare_run_id: str | None
    ) -> str | None:
        """Validate the prepare run reference and return its response."""
        has_prepare_run_id = bool(prepare_run_id and prepare_run_id.strip())

        if dashboard.prepare_app_id is None:
            if has_prepare_run_id:
                raise ValidationError("prepareRunId was provided but dashboard has no prepare app")
            return None

        if not has_prepare_run_id:
            raise ValidationError(
                "prepareRunId is required to run dashboard actions when prepare app is configured"
            )

        run_id = parse_id(prepare_run_id, "run")
        prepare_run = await self.context.runs.get_by_id(run_id)
        if prepare_run is None:
            raise NotFoundError(f"Prepare run '{run_id}' was not found")
        if prepare_run.app_id != dashboard.prepare_app_id:
            raise ValidationError("prepareRunId does not belong to this dashboard prepare app")
        if prepare_run.status != RunStatus.SUCCESS:
            raise ValidationError("prepareRunId must reference a successful prepare run")
        return prepare_run.response
