"""
Command handlers for the run engine.
"""

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
from apprunner.handlers.registry import HANDLERS, dispatch
from apprunner.handlers.runs import (
    CreateRunHandler,
    GetRunByIdHandler,
    GetRunsByAppIdAndStatusHandler,
    GetRunsByAppIdHandler,
    GetRunsByStatusHandler,
)

__all__ = [
    # Commands
    "CreateRun",
    "GetRunById",
    "GetRunsByAppId",
    "GetRunsByAppIdAndStatus",
    "GetRunsByStatus",
    "PrepareDashboard",
    "RunDashboardAction",
    # Handlers
    "CreateRunHandler",
    "GetRunByIdHandler",
    "GetRunsByAppIdAndStatusHandler",
    "GetRunsByAppIdHandler",
    "GetRunsByStatusHandler",
    "PrepareDashboardHandler",
    "RunDashboardActionHandler",
    # Dispatch
    "HANDLERS",
    "HandlerContext",
    "dispatch",
]
