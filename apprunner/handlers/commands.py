"""
Commands accepted by the run engine.

IDs arrive as strings and are parsed by the handlers, so malformed values
surface as validation errors rather than type errors at the call site.
"""

from dataclasses import dataclass, field

from apprunner.core.auth import CurrentUser
from apprunner.models.contracts import (
    CreateRunRequest,
    PrepareDashboardRequest,
    RunDashboardActionRequest,
)


@dataclass(frozen=True)
class CreateRun:
    actor_user_id: str
    app_id: str
    current_user: CurrentUser
    request: CreateRunRequest = field(default_factory=CreateRunRequest)


@dataclass(frozen=True)
class GetRunById:
    run_id: str


@dataclass(frozen=True)
class GetRunsByAppId:
    app_id: str
    skip: int
    take: int


@dataclass(frozen=True)
class GetRunsByStatus:
    status: str
    skip: int
    take: int


@dataclass(frozen=True)
class GetRunsByAppIdAndStatus:
    app_id: str
    status: str
    skip: int
    take: int


@dataclass(frozen=True)
class RunDashboardAction:
    actor_user_id: str
    dashboard_id: str
    action_id: str
    current_user: CurrentUser
    request: RunDashboardActionRequest = field(default_factory=RunDashboardActionRequest)


@dataclass(frozen=True)
class PrepareDashboard:
    actor_user_id: str
    dashboard_id: str
    current_user: CurrentUser
    request: PrepareDashboardRequest = field(default_factory=PrepareDashboardRequest)
