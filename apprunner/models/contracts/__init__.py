"""
Pydantic contract models for the run engine.
"""

from apprunner.models.contracts.apps import AppDefinition
from apprunner.models.contracts.common import KeyValuePair, PagedResult
from apprunner.models.contracts.dashboards import (
    DashboardAction,
    DashboardActionResult,
    DashboardBinding,
    DashboardDefinition,
    DashboardPrepareResult,
    DashboardRuntimeConfig,
    PrepareDashboardRequest,
    RunDashboardActionRequest,
)
from apprunner.models.contracts.inputs import (
    BooleanInputType,
    DateInputType,
    EmailInputType,
    Input,
    InputType,
    IntegerInputType,
    RadioInputType,
    RadioOption,
    RunInputValue,
    TextInputType,
    coerce_input_type,
    parse_legacy_input_type,
)
from apprunner.models.contracts.resources import ResourceDefinition
from apprunner.models.contracts.runs import (
    CreateRunRequest,
    ExecutableHttpRequest,
    RunRecord,
)
from apprunner.models.contracts.sql import (
    SqlFilter,
    SqlOrderBy,
    SqlQuery,
    SqlQueryConfig,
)

__all__ = [
    # Common
    "KeyValuePair",
    "PagedResult",
    # Inputs
    "Input",
    "InputType",
    "TextInputType",
    "EmailInputType",
    "DateInputType",
    "IntegerInputType",
    "BooleanInputType",
    "RadioInputType",
    "RadioOption",
    "RunInputValue",
    "coerce_input_type",
    "parse_legacy_input_type",
    # Apps / Resources
    "AppDefinition",
    "ResourceDefinition",
    # SQL
    "SqlFilter",
    "SqlOrderBy",
    "SqlQuery",
    "SqlQueryConfig",
    # Runs
    "CreateRunRequest",
    "ExecutableHttpRequest",
    "RunRecord",
    # Dashboards
    "DashboardAction",
    "DashboardActionResult",
    "DashboardBinding",
    "DashboardDefinition",
    "DashboardPrepareResult",
    "DashboardRuntimeConfig",
    "PrepareDashboardRequest",
    "RunDashboardActionRequest",
]
