"""
SQL contract models: structured query configuration and the resolved query.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from apprunner.models.contracts.common import KeyValuePair
from apprunner.models.enums import SqlFilterOperator, SqlQueryMode, SqlSortDirection


class SqlFilter(BaseModel):
    """WHERE clause condition"""
    column: str
    operator: SqlFilterOperator
    value: str | None = Field(
        default=None,
        description="Templated value; comma-delimited list for IN / NOT IN"
    )


class SqlOrderBy(BaseModel):
    """ORDER BY entry"""
    column: str
    direction: SqlSortDirection = SqlSortDirection.ASC


class SqlQueryConfig(BaseModel):
    """
    How an app builds its SQL statement.

    GUI mode describes the statement structurally (table, columns, filters,
    ordering, limit). Raw mode carries the statement text and its named
    parameters, which are always bound and never spliced into the text.
    """
    mode: SqlQueryMode = SqlQueryMode.GUI
    table: str | None = None
    columns: list[str] = Field(default_factory=list)
    filters: list[SqlFilter] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=1)
    order_by: list[SqlOrderBy] = Field(default_factory=list)
    raw_sql: str | None = None
    raw_sql_params: list[KeyValuePair] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_mode_fields(self) -> "SqlQueryConfig":
        if self.mode == SqlQueryMode.GUI and not self.table:
            raise ValueError("table is required in gui mode")
        if self.mode == SqlQueryMode.RAW and not (self.raw_sql and self.raw_sql.strip()):
            raise ValueError("raw_sql is required in raw mode")
        return self


class SqlQuery(BaseModel):
    """Fully resolved, parameterized SQL statement"""
    sql: str
    parameters: dict[str, Any] = Field(default_factory=dict)
