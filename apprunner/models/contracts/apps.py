"""
App contract models.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from apprunner.models.contracts.common import KeyValuePair
from apprunner.models.contracts.inputs import Input
from apprunner.models.contracts.sql import SqlQueryConfig
from apprunner.models.enums import HttpMethod


class AppDefinition(BaseModel):
    """
    Runnable request definition over a resource.

    URL path, parameters, headers and body values may contain
    ``{{ expression }}`` templates that are resolved per run. When
    ``sql_config`` is set the app runs a SQL query instead of an HTTP call.
    """
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    folder_id: UUID | None = None
    resource_id: UUID
    http_method: HttpMethod = HttpMethod.GET
    inputs: list[Input] = Field(default_factory=list)
    url_path: str | None = None
    url_parameters: list[KeyValuePair] = Field(default_factory=list)
    headers: list[KeyValuePair] = Field(default_factory=list)
    body: list[KeyValuePair] = Field(default_factory=list)
    use_dynamic_json_body: bool = False
    sql_config: SqlQueryConfig | None = None
    description: str | None = None
    is_deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("inputs")
    @classmethod
    def validate_unique_titles(cls, v: list[Input]) -> list[Input]:
        """Input titles must be unique within an app"""
        seen: set[str] = set()
        for item in v:
            if item.title in seen:
                raise ValueError(f"Duplicate input title: {item.title}")
            seen.add(item.title)
        return v

    def get_input(self, title: str) -> Input | None:
        for item in self.inputs:
            if item.title == title:
                return item
        return None
