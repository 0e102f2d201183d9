"""
SQL dispatch for composed app queries.

SqlExecutionService is the seam the run executor depends on; the Postgres
implementation opens a short-lived connection per query.
"""

import asyncio
import json
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from apprunner.models.contracts import ResourceDefinition, SqlQuery
from apprunner.models.enums import DatabaseEngine
from apprunner.services.run_engine.outcomes import DispatchOutcome

logger = logging.getLogger(__name__)

READ_ONLY_PREFIXES = ("SELECT", "WITH")


class SqlExecutionService(Protocol):
    """Executes a resolved query against a SQL resource."""

    async def execute_query(
        self, resource: ResourceDefinition, query: SqlQuery
    ) -> DispatchOutcome:
        ...


class SqlConfigurationError(Exception):
    """Raised when a resource lacks what is needed to connect."""


def build_connection_url(resource: ResourceDefinition) -> URL:
    """
    Build an asyncpg connection URL from a resource's database fields.

    Raises:
        SqlConfigurationError: If the engine is unsupported or a field is missing
    """
    if resource.database_engine != DatabaseEngine.POSTGRES:
        raise SqlConfigurationError("Unsupported database engine for SQL resource")

    required = {
        "database name": resource.database_name,
        "database host": resource.database_host,
        "database port": resource.database_port,
        "database username": resource.database_username,
    }
    for label, value in required.items():
        if value in (None, ""):
            raise SqlConfigurationError(f"SQL resource is missing {label}")

    query: dict[str, str] = {o.key: o.value for o in resource.connection_options}
    query["ssl"] = "require" if resource.use_ssl else "disable"

    return URL.create(
        "postgresql+asyncpg",
        username=resource.database_username,
        password=resource.database_password,
        host=resource.database_host,
        port=resource.database_port,
        database=resource.database_name,
        query=query,
    )


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (bytes, memoryview)):
        return bytes(value).hex()
    if isinstance(value, timedelta):
        return value.total_seconds()
    return str(value)


def rows_to_json(rows: list[dict[str, Any]]) -> str:
    return json.dumps(rows, default=_json_default)


class PostgresSqlExecutionService:
    """
    Runs read-only queries against PostgreSQL resources.

    Only statements starting with SELECT or WITH are accepted. Rows come
    back as a JSON array of objects, capped at ``max_rows``.
    """

    def __init__(self, timeout_seconds: float = 30.0, max_rows: int = 1000):
        self.timeout_seconds = timeout_seconds
        self.max_rows = max_rows

    async def execute_query(
        self, resource: ResourceDefinition, query: SqlQuery
    ) -> DispatchOutcome:
        if not query.sql.lstrip().upper().startswith(READ_ONLY_PREFIXES):
            return DispatchOutcome.failed("Only SELECT queries are allowed for SQL resources")

        try:
            url = build_connection_url(resource)
        except SqlConfigurationError as e:
            return DispatchOutcome.failed(str(e))

        try:
            rows = await asyncio.wait_for(
                self._fetch(url, query), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(f"SQL query on resource {resource.id} timed out")
            return DispatchOutcome.failed(
                f"SQL query timed out after {self.timeout_seconds}s"
            )
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"SQL query on resource {resource.id} failed: {e}")
            return DispatchOutcome.failed(f"SQL query failed: {e}")

        try:
            payload = rows_to_json(rows)
        except (TypeError, ValueError) as e:
            logger.warning(f"SQL result from resource {resource.id} could not be serialized: {e}")
            return DispatchOutcome.failed(f"SQL result could not be serialized: {e}")

        return DispatchOutcome.ok(payload)

    async def _fetch(self, url: URL, query: SqlQuery) -> list[dict[str, Any]]:
        engine = create_async_engine(url, poolclass=NullPool)
        try:
            async with engine.connect() as conn:
                result = await conn.execute(text(query.sql), query.parameters)
                return [dict(row) for row in result.mappings().fetchmany(self.max_rows)]
        finally:
            await engine.dispose()
