"""
SQL query builder.

Turns an app's SqlQueryConfig (with templates already resolved) into a
parameterized SqlQuery. Values are always bound as named parameters.
Identifiers cannot be bound, so every table and column must be declared in
the resource's schema and match a plain identifier pattern; they are then
emitted double-quoted.
"""

import re
from typing import Any

from apprunner.models.contracts.sql import SqlFilter, SqlQuery, SqlQueryConfig
from apprunner.models.enums import SqlFilterOperator, SqlQueryMode

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
INTEGER_PATTERN = re.compile(r"^-?\d+$")
DECIMAL_PATTERN = re.compile(r"^-?\d+\.\d+$")

OPERATOR_SQL: dict[SqlFilterOperator, str] = {
    SqlFilterOperator.EQUALS: "=",
    SqlFilterOperator.NOT_EQUALS: "!=",
    SqlFilterOperator.GREATER_THAN: ">",
    SqlFilterOperator.GREATER_THAN_OR_EQUAL: ">=",
    SqlFilterOperator.LESS_THAN: "<",
    SqlFilterOperator.LESS_THAN_OR_EQUAL: "<=",
    SqlFilterOperator.LIKE: "LIKE",
    SqlFilterOperator.ILIKE: "ILIKE",
    SqlFilterOperator.IN: "IN",
    SqlFilterOperator.NOT_IN: "NOT IN",
    SqlFilterOperator.IS_NULL: "IS NULL",
    SqlFilterOperator.IS_NOT_NULL: "IS NOT NULL",
}

_NULL_OPERATORS = {SqlFilterOperator.IS_NULL, SqlFilterOperator.IS_NOT_NULL}
_LIST_OPERATORS = {SqlFilterOperator.IN, SqlFilterOperator.NOT_IN}


class SqlBuildError(Exception):
    """Raised when a query configuration cannot be turned into safe SQL."""


def build_sql_query(config: SqlQueryConfig, schema: dict[str, list[str]]) -> SqlQuery:
    """
    Build a parameterized query from a resolved configuration.

    Args:
        config: SQL configuration with templates already resolved
        schema: Allowed tables and their columns, ``{table: [columns]}``

    Raises:
        SqlBuildError: For undeclared or malformed identifiers and bad filters
    """
    if config.mode == SqlQueryMode.RAW:
        return build_raw_query(config)
    return build_gui_query(config, schema)


def build_raw_query(config: SqlQueryConfig) -> SqlQuery:
    """Use the raw statement verbatim; parameters are bound by name."""
    if not config.raw_sql or not config.raw_sql.strip():
        raise SqlBuildError("Raw SQL query is empty")
    parameters = {
        param.key.lstrip("@:"): bind_value(param.value)
        for param in config.raw_sql_params
    }
    return SqlQuery(sql=config.raw_sql, parameters=parameters)


def build_gui_query(config: SqlQueryConfig, schema: dict[str, list[str]]) -> SqlQuery:
    if not config.table:
        raise SqlBuildError("SQL table is required")
    if config.table not in schema:
        raise SqlBuildError(f"Table '{config.table}' is not declared in the resource schema")
    allowed_columns = set(schema[config.table])

    def column(name: str) -> str:
        if name not in allowed_columns:
            raise SqlBuildError(
                f"Column '{name}' is not declared for table '{config.table}'"
            )
        return quote_identifier(name)

    select_list = ", ".join(column(c) for c in config.columns) if config.columns else "*"
    parts = [f"SELECT {select_list} FROM {quote_identifier(config.table)}"]
    parameters: dict[str, Any] = {}

    if config.filters:
        conditions = [
            _build_condition(f, column(f.column), index, parameters)
            for index, f in enumerate(config.filters)
        ]
        parts.append("WHERE " + " AND ".join(conditions))

    if config.order_by:
        ordering = ", ".join(
            f"{column(o.column)} {o.direction.value.upper()}" for o in config.order_by
        )
        parts.append(f"ORDER BY {ordering}")

    if config.limit is not None:
        parts.append(f"LIMIT {int(config.limit)}")

    return SqlQuery(sql=" ".join(parts), parameters=parameters)


def quote_identifier(name: str) -> str:
    """Validate a (possibly schema-qualified) identifier and double-quote each segment."""
    segments = name.split(".")
    for segment in segments:
        if not IDENTIFIER_PATTERN.match(segment):
            raise SqlBuildError(f"Invalid SQL identifier: {name}")
    return ".".join(f'"{segment}"' for segment in segments)


def bind_value(value: str | None) -> Any:
    """Convert a templated string into the Python type the driver should bind."""
    if value is None:
        return None
    stripped = value.strip()
    if INTEGER_PATTERN.match(stripped):
        return int(stripped)
    if DECIMAL_PATTERN.match(stripped):
        return float(stripped)
    return value


def _build_condition(
    sql_filter: SqlFilter, column_sql: str, index: int, parameters: dict[str, Any]
) -> str:
    operator = sql_filter.operator
    operator_sql = OPERATOR_SQL[operator]

    if operator in _NULL_OPERATORS:
        return f"{column_sql} {operator_sql}"

    if sql_filter.value is None:
        raise SqlBuildError(f"Filter on '{sql_filter.column}' requires a value")

    if operator in _LIST_OPERATORS:
        items = [item.strip() for item in sql_filter.value.split(",") if item.strip()]
        if not items:
            raise SqlBuildError(f"Filter on '{sql_filter.column}' requires at least one value")
        names = []
        for item_index, item in enumerate(items):
            name = f"p{index}_{item_index}"
            parameters[name] = bind_value(item)
            names.append(f":{name}")
        return f"{column_sql} {operator_sql} ({', '.join(names)})"

    name = f"p{index}"
    parameters[name] = bind_value(sql_filter.value)
    return f"{column_sql} {operator_sql} :{name}"
