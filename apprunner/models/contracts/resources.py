"""
Resource contract models.

A resource is the shared connection template apps are built on: either an
HTTP endpoint (base URL plus default parameters, headers and body) or a
database connection.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from apprunner.models.contracts.common import KeyValuePair
from apprunner.models.enums import DatabaseAuthScheme, DatabaseEngine, ResourceKind


class ResourceDefinition(BaseModel):
    """Resource as read by the run engine"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    space_id: UUID | None = None
    description: str | None = None
    kind: ResourceKind = ResourceKind.HTTP

    # HTTP defaults (the floor every app request starts from)
    base_url: str | None = None
    url_parameters: list[KeyValuePair] = Field(default_factory=list)
    headers: list[KeyValuePair] = Field(default_factory=list)
    body: list[KeyValuePair] = Field(default_factory=list)

    # Database connection
    database_engine: DatabaseEngine | None = None
    database_host: str | None = None
    database_port: int | None = Field(default=None, ge=1, le=65535)
    database_name: str | None = None
    database_auth_scheme: DatabaseAuthScheme | None = None
    database_username: str | None = None
    database_password: str | None = None
    use_ssl: bool = False
    connection_options: list[KeyValuePair] = Field(default_factory=list)
    sql_schema: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Tables and columns apps may reference in GUI queries"
    )

    is_deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_sql(self) -> bool:
        return self.kind == ResourceKind.SQL
