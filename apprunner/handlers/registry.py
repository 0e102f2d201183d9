"""
Command dispatch: one handler class per command type.
"""

from typing import Any

from apprunner.handlers.commands import (
    CreateRun,
    GetRunById,
    GetRunsByAppId,
    GetRunsByAppIdAndStatus,
    GetRunsByStatus,
    PrepareDashboard,
    RunDashboardAction,
)
from apprunner.handlers.context import HandlerContext
from apprunner.handlers.dashboards import PrepareDashboardHandler, RunDashboardActionHandler
from apprunner.handlers.runs import (
    CreateRunHandler,
    GetRunByIdHandler,
    GetRunsByAppIdAndStatusHandler,
    GetRunsByAppIdHandler,
    GetRunsByStatusHandler,
)

HANDLERS: dict[type, type] = {
    CreateRun: CreateRunHandler,
    GetRunById: GetRunByIdHandler,
    GetRunsByAppId: GetRunsByAppIdHandler,
    GetRunsByStatus: GetRunsByStatusHandler,
    GetRunsByAppIdAndStatus: GetRunsByAppIdAndStatusHandler,
    RunDashboardAction: RunDashboardActionHandler,
    PrepareDashboard: PrepareDashboardHandler,
}


async def dispatch(context: HandlerContext, command: Any) -> Any:
    """Route a command to its handler."""
    handler_type = HANDLERS.get(type(command))
    if handler_type is None:
        raise TypeError(f"No handler registered for {type(command).__name__}")
    return await handler_type(context).handle(command)
