"""
Dashboard contract models.

A dashboard optionally runs a "prepare" app to gather context, then runs one
of its configured "action" apps with inputs wired from load inputs, action
inputs, literals or fields of the prepare run's response.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from apprunner.models.contracts.inputs import RunInputValue
from apprunner.models.enums import DashboardBindingSourceType, RunStatus


class DashboardAction(BaseModel):
    """Action button: a stable id mapped to the app it runs"""
    id: str
    app_id: UUID


class DashboardBinding(BaseModel):
    """Maps one source value onto an input of the targeted app"""
    action_id: str | None = None
    app_id: UUID | None = None
    input_name: str
    source_type: DashboardBindingSourceType
    source_key: str | None = None
    literal_value: str | None = None


class DashboardRuntimeConfig(BaseModel):
    """Parsed runtime configuration of a dashboard"""
    actions: list[DashboardAction] = Field(default_factory=list)
    bindings: list[DashboardBinding] = Field(default_factory=list)

    def find_action(self, action_id: str) -> DashboardAction | None:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None


class DashboardDefinition(BaseModel):
    """Dashboard as read by the run engine"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    folder_id: UUID | None = None
    prepare_app_id: UUID | None = None
    configuration: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw runtime configuration JSON (actions and bindings)"
    )
    is_deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PrepareDashboardRequest(BaseModel):
    """Input for running a dashboard's prepare app"""
    load_inputs: list[RunInputValue] = Field(default_factory=list)


class RunDashboardActionRequest(BaseModel):
    """Input for running one dashboard action"""
    prepare_run_id: str | None = None
    load_inputs: list[RunInputValue] = Field(default_factory=list)
    action_inputs: list[RunInputValue] = Field(default_factory=list)
    prior_action_run_ids: list[str] | None = None


class DashboardPrepareResult(BaseModel):
    """Outcome of a prepare run"""
    prepare_run_id: UUID
    status: RunStatus
    response: str | None = None
    error_message: str | None = None


class DashboardActionResult(BaseModel):
    """Outcome of an action run"""
    action_run_id: UUID
    status: RunStatus
    response: str | None = None
    error_message: str | None = None
