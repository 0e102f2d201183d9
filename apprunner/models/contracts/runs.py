"""
Run contract models.

A run is one execution attempt of an app: the submitted input values, the
fully resolved request (HTTP or SQL), and the captured outcome.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from apprunner.models.contracts.common import KeyValuePair
from apprunner.models.contracts.inputs import RunInputValue
from apprunner.models.contracts.sql import SqlQuery
from apprunner.models.enums import HttpMethod, RunStatus


class ExecutableHttpRequest(BaseModel):
    """Fully resolved HTTP call ready for dispatch"""
    base_url: str
    url_parameters: list[KeyValuePair] = Field(default_factory=list)
    headers: list[KeyValuePair] = Field(default_factory=list)
    body: list[KeyValuePair] = Field(default_factory=list)
    http_method: HttpMethod = HttpMethod.GET
    use_json_body: bool = False


class RunRecord(BaseModel):
    """Persisted run"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    app_id: UUID
    status: RunStatus = RunStatus.PENDING
    input_values: list[RunInputValue] = Field(default_factory=list)
    executable_request: ExecutableHttpRequest | None = None
    executed_sql: SqlQuery | None = None
    response: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    version: int = Field(default=0, description="Optimistic concurrency token")
    is_deleted: bool = False


class CreateRunRequest(BaseModel):
    """Input for creating a run of an app"""
    input_values: list[RunInputValue] = Field(default_factory=list)
    dynamic_body: list[KeyValuePair] | None = Field(
        default=None,
        description="Explicit JSON body pairs for apps using a dynamic JSON body"
    )
