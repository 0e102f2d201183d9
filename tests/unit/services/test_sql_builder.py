"""
Unit tests for the SQL query builder.
"""

import pytest

from apprunner.models.contracts import SqlQueryConfig
from apprunner.services.run_engine.sql_builder import (
    SqlBuildError,
    bind_value,
    build_sql_query,
    quote_identifier,
)

SCHEMA = {
    "users": ["id", "email", "name", "age"],
    "public.orders": ["id", "total"],
}


def gui(**fields) -> SqlQueryConfig:
    return SqlQueryConfig.model_validate({"mode": "gui", **fields})


class TestGuiQueries:
    """Structured query building"""

    def test_select_star_when_no_columns(self):
        query = build_sql_query(gui(table="users"), SCHEMA)

        assert query.sql == 'SELECT * FROM "users"'
        assert query.parameters == {}

    def test_full_query(self):
        config = gui(
            table="users",
            columns=["id", "email"],
            filters=[
                {"column": "age", "operator": "greater_than_or_equal", "value": "18"},
                {"column": "name", "operator": "ilike", "value": "%ada%"},
            ],
            order_by=[{"column": "name", "direction": "desc"}],
            limit=25,
        )

        query = build_sql_query(config, SCHEMA)

        assert query.sql == (
            'SELECT "id", "email" FROM "users" '
            'WHERE "age" >= :p0 AND "name" ILIKE :p1 '
            'ORDER BY "name" DESC LIMIT 25'
        )
        assert query.parameters == {"p0": 18, "p1": "%ada%"}

    def test_in_filter_binds_each_item(self):
        config = gui(
            table="users",
            filters=[{"column": "id", "operator": "in", "value": "1, 2,3"}],
        )

        query = build_sql_query(config, SCHEMA)

        assert query.sql == 'SELECT * FROM "users" WHERE "id" IN (:p0_0, :p0_1, :p0_2)'
        assert query.parameters == {"p0_0": 1, "p0_1": 2, "p0_2": 3}

    def test_null_operators_take_no_value(self):
        config = gui(
            table="users",
            filters=[{"column": "email", "operator": "is_not_null"}],
        )

        query = build_sql_query(config, SCHEMA)

        assert query.sql == 'SELECT * FROM "users" WHERE "email" IS NOT NULL'

    def test_schema_qualified_table(self):
        query = build_sql_query(gui(table="public.orders", columns=["total"]), SCHEMA)

        assert query.sql == 'SELECT "total" FROM "public"."orders"'

    def test_injected_value_stays_a_parameter(self):
        config = gui(
            table="users",
            filters=[{"column": "name", "operator": "equals", "value": "x'; DROP TABLE users; --"}],
        )

        query = build_sql_query(config, SCHEMA)

        assert "DROP" not in query.sql
        assert query.parameters["p0"] == "x'; DROP TABLE users; --"

    def test_undeclared_table_is_rejected(self):
        with pytest.raises(SqlBuildError, match="Table 'secrets' is not declared"):
            build_sql_query(gui(table="secrets"), SCHEMA)

    def test_undeclared_column_is_rejected(self):
        with pytest.raises(SqlBuildError, match="Column 'password' is not declared"):
            build_sql_query(gui(table="users", columns=["password"]), SCHEMA)

    def test_empty_schema_rejects_everything(self):
        with pytest.raises(SqlBuildError):
            build_sql_query(gui(table="users"), {})

    def test_filter_without_value_is_rejected(self):
        config = gui(table="users", filters=[{"column": "name", "operator": "equals"}])

        with pytest.raises(SqlBuildError, match="requires a value"):
            build_sql_query(config, SCHEMA)


class TestRawQueries:
    """Raw statements with named parameters"""

    def test_statement_is_kept_and_params_bound(self):
        config = SqlQueryConfig(
            mode="raw",
            raw_sql="SELECT * FROM users WHERE id = :id AND name = :name",
            raw_sql_params=[{"key": "@id", "value": "7"}, {"key": ":name", "value": "Ada"}],
        )

        query = build_sql_query(config, {})

        assert query.sql == "SELECT * FROM users WHERE id = :id AND name = :name"
        assert query.parameters == {"id": 7, "name": "Ada"}


class TestHelpers:
    def test_quote_identifier_rejects_injection(self):
        with pytest.raises(SqlBuildError, match="Invalid SQL identifier"):
            quote_identifier('users"; --')

    @pytest.mark.parametrize("raw,expected", [
        ("42", 42),
        ("-3", -3),
        ("2.50", 2.5),
        ("abc", "abc"),
        ("1e5", "1e5"),
        (None, None),
    ])
    def test_bind_value(self, raw, expected):
        assert bind_value(raw) == expected
