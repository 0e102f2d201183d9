"""
Unit tests for request composition.
"""

import pytest

from apprunner.models.enums import HttpMethod
from apprunner.services.run_engine import CompositionError, RequestComposer
from apprunner.services.run_engine.request_composer import join_url
from tests.helpers.factories import (
    iv,
    kv,
    make_app,
    make_input,
    make_resource,
    make_sql_resource,
    make_user,
)


@pytest.fixture
def composer():
    return RequestComposer()


def pairs(items):
    return [(p.key, p.value) for p in items]


class TestComposeHttp:
    """Resource plus app composition"""

    def test_resource_entries_come_first_and_app_entries_are_appended(self, composer):
        resource = make_resource(
            base_url="https://api.example.com/v1",
            headers=[kv("Authorization", "Bearer abc")],
            url_parameters=[kv("tenant", "acme")],
        )
        app = make_app(
            resource_id=resource.id,
            http_method=HttpMethod.POST,
            url_path="/users",
            headers=[kv("X-Trace", "1"), kv("Authorization", "Bearer override")],
            url_parameters=[kv("page", "1")],
        )

        composed = composer.compose(app, resource, [])
        request = composed.http_request

        assert composed.sql_query is None
        assert request.base_url == "https://api.example.com/v1/users"
        assert request.http_method == HttpMethod.POST
        assert pairs(request.headers) == [
            ("Authorization", "Bearer abc"),
            ("X-Trace", "1"),
            ("Authorization", "Bearer override"),
        ]
        assert pairs(request.url_parameters) == [("tenant", "acme"), ("page", "1")]

    def test_templates_are_resolved_everywhere(self, composer):
        resource = make_resource()
        app = make_app(
            resource_id=resource.id,
            inputs=[make_input("UserId"), make_input("Field")],
            url_path="/users/{{ @UserId }}",
            url_parameters=[kv("fields", "{{ @Field }}")],
            headers=[kv("X-User", "{{ @current_user.email }}")],
            body=[kv("{{ @Field }}", "{{ @UserId }}")],
        )

        request = composer.compose(
            app, resource, [iv("UserId", "42"), iv("Field", "name")], current_user=make_user()
        ).http_request

        assert request.base_url == "https://api.example.com/users/42"
        assert pairs(request.url_parameters) == [("fields", "name")]
        assert pairs(request.headers) == [("X-User", "ada@example.com")]
        assert pairs(request.body) == [("name", "42")]

    def test_unresolved_template_is_a_composition_error(self, composer):
        resource = make_resource()
        app = make_app(resource_id=resource.id, url_path="/users/{{ @Missing }}")

        with pytest.raises(CompositionError) as exc_info:
            composer.compose(app, resource, [])

        assert exc_info.value.errors == ["Variable 'Missing' has no value"]

    def test_resource_without_base_url(self, composer):
        resource = make_resource(base_url=None, name="Broken")
        app = make_app(resource_id=resource.id)

        with pytest.raises(CompositionError, match="Resource 'Broken' has no base URL"):
            composer.compose(app, resource, [])

    def test_dynamic_json_body_uses_input_values(self, composer):
        resource = make_resource(body=[kv("ignored", "x")])
        app = make_app(
            resource_id=resource.id,
            http_method=HttpMethod.POST,
            inputs=[make_input("Name"), make_input("Age", "integer")],
            use_dynamic_json_body=True,
        )

        request = composer.compose(
            app, resource, [iv("Name", "Ada"), iv("Age", "36")]
        ).http_request

        assert request.use_json_body is True
        assert pairs(request.body) == [("Name", "Ada"), ("Age", "36")]

    def test_dynamic_body_pairs_replace_input_values(self, composer):
        resource = make_resource()
        app = make_app(resource_id=resource.id, use_dynamic_json_body=True)

        request = composer.compose(
            app, resource, [], dynamic_body=[kv("raw", "{{ not templated }}")]
        ).http_request

        assert pairs(request.body) == [("raw", "{{ not templated }}")]

    def test_composition_is_repeatable(self, composer):
        resource = make_resource(headers=[kv("A", "1")])
        app = make_app(
            resource_id=resource.id,
            inputs=[make_input("Id")],
            url_path="/items/{{ @Id }}",
        )
        values = [iv("Id", "9")]

        first = composer.compose(app, resource, values)
        second = composer.compose(app, resource, values)

        assert first == second


class TestComposeSql:
    """SQL apps"""

    def test_gui_filters_are_templated(self, composer):
        resource = make_sql_resource()
        app = make_app(
            resource_id=resource.id,
            inputs=[make_input("MinAge", "integer")],
            sql_config={
                "mode": "gui",
                "table": "users",
                "columns": ["id"],
                "filters": [{"column": "age", "operator": "greater_than", "value": "{{ @MinAge }}"}],
            },
        )

        composed = composer.compose(app, resource, [iv("MinAge", "21")])

        assert composed.http_request is None
        assert composed.sql_query.sql == 'SELECT "id" FROM "users" WHERE "age" > :p0'
        assert composed.sql_query.parameters == {"p0": 21}

    def test_raw_params_are_templated_but_statement_is_not(self, composer):
        resource = make_sql_resource()
        app = make_app(
            resource_id=resource.id,
            inputs=[make_input("Email")],
            sql_config={
                "mode": "raw",
                "raw_sql": "SELECT * FROM users WHERE email = :email",
                "raw_sql_params": [{"key": "email", "value": "{{ @Email }}"}],
            },
        )

        query = composer.compose(app, resource, [iv("Email", "a@b.co")]).sql_query

        assert query.sql == "SELECT * FROM users WHERE email = :email"
        assert query.parameters == {"email": "a@b.co"}

    def test_sql_app_on_http_resource(self, composer):
        resource = make_resource(name="Api")
        app = make_app(resource_id=resource.id, sql_config={"mode": "gui", "table": "users"})

        with pytest.raises(CompositionError, match="Resource 'Api' is not a SQL resource"):
            composer.compose(app, resource, [])

    def test_undeclared_table_becomes_composition_error(self, composer):
        resource = make_sql_resource()
        app = make_app(resource_id=resource.id, sql_config={"mode": "gui", "table": "secrets"})

        with pytest.raises(CompositionError, match="not declared"):
            composer.compose(app, resource, [])


class TestJoinUrl:
    @pytest.mark.parametrize("base,path,expected", [
        ("https://x.io", None, "https://x.io"),
        ("https://x.io/", "/a", "https://x.io/a"),
        ("https://x.io/api", "a/b", "https://x.io/api/a/b"),
    ])
    def test_join_url(self, base, path, expected):
        assert join_url(base, path) == expected
