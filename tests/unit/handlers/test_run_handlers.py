"""
Unit tests for run command handlers, wired to in-memory repositories.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from apprunner.core.exceptions import NotFoundError, ValidationError
from apprunner.handlers import (
    CreateRun,
    CreateRunHandler,
    GetRunById,
    GetRunByIdHandler,
    GetRunsByAppId,
    GetRunsByAppIdAndStatus,
    GetRunsByStatus,
    dispatch,
)
from apprunner.models.contracts import CreateRunRequest, ExecutableHttpRequest, PagedResult
from apprunner.models.enums import HttpMethod, RunStatus
from apprunner.services.run_engine import DispatchOutcome
from tests.helpers.factories import (
    iv,
    kv,
    make_app,
    make_input,
    make_resource,
    make_run,
    make_sql_resource,
)

ACTOR = "actor-1"


def create_run(app_id, current_user, *values, dynamic_body=None) -> CreateRun:
    return CreateRun(
        actor_user_id=ACTOR,
        app_id=str(app_id),
        current_user=current_user,
        request=CreateRunRequest(input_values=list(values), dynamic_body=dynamic_body),
    )


class TestCreateRun:
    """CreateRun pipeline"""

    @pytest.mark.asyncio
    async def test_simple_get_app_succeeds(self, context, apps, resources, runs, current_user):
        resource = resources.put(make_resource())
        app = apps.put(make_app(name="Test App", resource_id=resource.id))

        run = await CreateRunHandler(context).handle(create_run(app.id, current_user))

        assert run.app_id == app.id
        assert run.status == RunStatus.SUCCESS
        assert run.response == '{"ok": true}'
        assert run.started_at is not None
        assert run.completed_at is not None
        assert runs.history[run.id] == [RunStatus.PENDING, RunStatus.RUNNING, RunStatus.SUCCESS]

    @pytest.mark.asyncio
    async def test_records_the_resolved_request(
        self, context, apps, resources, http_stub, current_user
    ):
        resource = resources.put(make_resource(headers=[kv("X-Api-Key", "k")]))
        app = apps.put(make_app(
            resource_id=resource.id,
            http_method=HttpMethod.POST,
            inputs=[make_input("Id", "integer", required=True)],
            url_path="/orders/{{ @Id }}",
            headers=[kv("X-User", "{{ @current_user.id }}")],
            body=[kv("status", "shipped")],
        ))

        run = await CreateRunHandler(context).handle(create_run(app.id, current_user, iv("Id", "7")))

        assert run.executable_request == ExecutableHttpRequest(
            base_url="https://api.example.com/orders/7",
            headers=[kv("X-Api-Key", "k"), kv("X-User", current_user.user_id)],
            body=[kv("status", "shipped")],
            http_method=HttpMethod.POST,
        )
        sent = http_stub.last_request
        assert sent.method == "POST"
        assert str(sent.url) == "https://api.example.com/orders/7"
        assert sent.content == b"status=shipped"

    @pytest.mark.asyncio
    async def test_http_error_status_is_failure(
        self, context, apps, resources, http_stub, current_user
    ):
        http_stub.status_code = 502
        http_stub.text = "bad gateway"
        resource = resources.put(make_resource())
        app = apps.put(make_app(resource_id=resource.id))

        run = await CreateRunHandler(context).handle(create_run(app.id, current_user))

        assert run.status == RunStatus.FAILURE
        assert run.error_message == "HTTP request failed with status 502: bad gateway"

    @pytest.mark.asyncio
    async def test_non_ascii_header_value_ends_in_failure(
        self, context, apps, resources, runs, http_stub, current_user
    ):
        resource = resources.put(make_resource())
        app = apps.put(make_app(
            resource_id=resource.id,
            inputs=[make_input("Name", "text", required=True)],
            headers=[kv("X-Name", "{{ @Name }}")],
        ))

        run = await CreateRunHandler(context).handle(create_run(app.id, current_user, iv("Name", "José")))

        assert run.status == RunStatus.FAILURE
        assert run.error_message.startswith("Unexpected error during HTTP request:")
        assert run.started_at is not None
        assert run.completed_at is not None
        assert runs.history[run.id] == [RunStatus.PENDING, RunStatus.RUNNING, RunStatus.FAILURE]
        assert http_stub.requests == []

    @pytest.mark.asyncio
    async def test_unexpected_transport_error_ends_in_failure(
        self, context, apps, resources, runs, http_stub, current_user
    ):
        http_stub.error = RuntimeError("boom")
        resource = resources.put(make_resource())
        app = apps.put(make_app(resource_id=resource.id))

        run = await CreateRunHandler(context).handle(create_run(app.id, current_user))

        assert run.status == RunStatus.FAILURE
        assert run.error_message == "Unexpected error during HTTP request: boom"
        assert run.completed_at is not None
        assert runs.history[run.id] == [RunStatus.PENDING, RunStatus.RUNNING, RunStatus.FAILURE]

    @pytest.mark.asyncio
    async def test_missing_required_input(self, context, apps, resources, runs, current_user):
        resource = resources.put(make_resource())
        app = apps.put(make_app(
            resource_id=resource.id,
            inputs=[make_input("RequiredField", required=True)],
        ))

        with pytest.raises(ValidationError) as exc_info:
            await CreateRunHandler(context).handle(create_run(app.id, current_user))

        assert exc_info.value.message == "Missing required inputs: RequiredField"
        assert runs.items == {}

    @pytest.mark.asyncio
    async def test_every_missing_title_is_named(self, context, apps, resources, current_user):
        resource = resources.put(make_resource())
        app = apps.put(make_app(
            resource_id=resource.id,
            inputs=[
                make_input("First", required=True),
                make_input("Second", required=True),
                make_input("Third", required=True, default_value="x"),
            ],
        ))

        with pytest.raises(ValidationError, match="Missing required inputs: First, Second$"):
            await CreateRunHandler(context).handle(create_run(app.id, current_user))

    @pytest.mark.asyncio
    async def test_mistyped_input_is_rejected_before_persisting(
        self, context, apps, resources, runs, current_user
    ):
        resource = resources.put(make_resource())
        app = apps.put(make_app(resource_id=resource.id, inputs=[make_input("Count", "integer")]))

        with pytest.raises(ValidationError, match="Invalid value for input 'Count'"):
            await CreateRunHandler(context).handle(
                create_run(app.id, current_user, iv("Count", "many"))
            )

        assert runs.items == {}

    @pytest.mark.asyncio
    async def test_defaults_are_stored_with_the_run(self, context, apps, resources, current_user):
        resource = resources.put(make_resource())
        app = apps.put(make_app(
            resource_id=resource.id,
            inputs=[make_input("Region", default_value="eu")],
            url_parameters=[kv("region", "{{ @Region }}")],
        ))

        run = await CreateRunHandler(context).handle(create_run(app.id, current_user))

        assert [(v.title, v.value) for v in run.input_values] == [("Region", "eu")]
        assert run.executable_request.url_parameters == [kv("region", "eu")]

    @pytest.mark.asyncio
    async def test_missing_resource_is_invalid_configuration(
        self, context, apps, runs, http_stub, current_user
    ):
        app = apps.put(make_app(resource_id=uuid4()))

        run = await CreateRunHandler(context).handle(create_run(app.id, current_user))

        assert run.status == RunStatus.INVALID_CONFIGURATION
        assert "resource not found" in run.error_message
        assert run.executable_request is None
        assert runs.items[run.id].status == RunStatus.INVALID_CONFIGURATION
        assert runs.history[run.id] == [RunStatus.PENDING, RunStatus.INVALID_CONFIGURATION]
        assert http_stub.requests == []

    @pytest.mark.asyncio
    async def test_unresolvable_template_is_invalid_configuration(
        self, context, apps, resources, http_stub, current_user
    ):
        resource = resources.put(make_resource())
        app = apps.put(make_app(resource_id=resource.id, url_path="/x/{{ @Nope }}"))

        run = await CreateRunHandler(context).handle(create_run(app.id, current_user))

        assert run.status == RunStatus.INVALID_CONFIGURATION
        assert run.error_message == "Variable 'Nope' has no value"
        assert http_stub.requests == []

    @pytest.mark.asyncio
    async def test_sql_app_dispatches_query(
        self, context, apps, resources, sql_service, current_user
    ):
        sql_service.outcome = DispatchOutcome.ok('[{"id": 1}]')
        resource = resources.put(make_sql_resource())
        app = apps.put(make_app(
            resource_id=resource.id,
            inputs=[make_input("Email", "email", required=True)],
            sql_config={
                "table": "users",
                "columns": ["id"],
                "filters": [{"column": "email", "operator": "equals", "value": "{{ @Email }}"}],
                "limit": 1,
            },
        ))

        run = await CreateRunHandler(context).handle(
            create_run(app.id, current_user, iv("Email", "ada@example.com"))
        )

        assert run.status == RunStatus.SUCCESS
        assert run.response == '[{"id": 1}]'
        assert run.executed_sql.sql == 'SELECT "id" FROM "users" WHERE "email" = :p0 LIMIT 1'
        assert run.executed_sql.parameters == {"p0": "ada@example.com"}
        assert sql_service.calls[0][0] == resource

    @pytest.mark.asyncio
    async def test_unknown_app(self, context, current_user):
        with pytest.raises(NotFoundError, match="App not found"):
            await CreateRunHandler(context).handle(create_run(uuid4(), current_user))

    @pytest.mark.asyncio
    async def test_malformed_app_id(self, context, current_user):
        with pytest.raises(ValidationError, match="Invalid app ID format"):
            await CreateRunHandler(context).handle(create_run("not-a-guid", current_user))

    @pytest.mark.asyncio
    async def test_dynamic_body(self, context, apps, resources, http_stub, current_user):
        resource = resources.put(make_resource())
        app = apps.put(make_app(
            resource_id=resource.id,
            http_method=HttpMethod.POST,
            use_dynamic_json_body=True,
        ))

        run = await CreateRunHandler(context).handle(
            create_run(app.id, current_user, dynamic_body=[kv("qty", "3"), kv("note", "hi")])
        )

        assert run.status == RunStatus.SUCCESS
        assert http_stub.last_request.headers["Content-Type"] == "application/json"
        assert http_stub.last_request.content == b'{"qty": 3, "note": "hi"}'


class TestGetRuns:
    """Run queries"""

    @pytest.mark.asyncio
    async def test_get_by_id(self, context, runs):
        run = await runs.add(make_run())

        found = await GetRunByIdHandler(context).handle(GetRunById(run_id=str(run.id)))

        assert found.id == run.id

    @pytest.mark.asyncio
    async def test_get_by_id_excludes_deleted(self, context, runs):
        run = await runs.add(make_run(is_deleted=True))

        with pytest.raises(NotFoundError, match="Run not found"):
            await GetRunByIdHandler(context).handle(GetRunById(run_id=str(run.id)))

    @pytest.mark.asyncio
    async def test_get_by_id_malformed(self, context):
        with pytest.raises(ValidationError, match="Invalid run ID format"):
            await GetRunByIdHandler(context).handle(GetRunById(run_id="123"))

    @pytest.mark.asyncio
    async def test_by_app_and_status_filters_and_counts(self, context, runs):
        app_id = uuid4()
        now = datetime.now(timezone.utc)
        for minutes in range(5):
            await runs.add(make_run(app_id=app_id, created_at=now - timedelta(minutes=minutes)))
        await runs.add(make_run(app_id=app_id, status=RunStatus.SUCCESS))
        await runs.add(make_run(app_id=uuid4()))

        page = await dispatch(
            context, GetRunsByAppIdAndStatus(app_id=str(app_id), status="pending", skip=1, take=2)
        )

        assert isinstance(page, PagedResult)
        assert page.total_count == 5
        assert page.skip == 1
        assert page.take == 2
        assert len(page.items) == 2
        assert all(r.app_id == app_id and r.status == RunStatus.PENDING for r in page.items)
        assert page.items[0].created_at > page.items[1].created_at

    @pytest.mark.asyncio
    async def test_by_app_id(self, context, runs):
        app_id = uuid4()
        await runs.add(make_run(app_id=app_id))
        await runs.add(make_run(app_id=app_id, status=RunStatus.FAILURE))
        await runs.add(make_run())

        page = await dispatch(context, GetRunsByAppId(app_id=str(app_id), skip=0, take=10))

        assert page.total_count == 2

    @pytest.mark.asyncio
    async def test_by_status(self, context, runs):
        await runs.add(make_run(status=RunStatus.FAILURE))
        await runs.add(make_run())

        page = await dispatch(context, GetRunsByStatus(status="FAILURE", skip=0, take=10))

        assert page.total_count == 1
        assert page.items[0].status == RunStatus.FAILURE

    @pytest.mark.asyncio
    async def test_invalid_status(self, context):
        with pytest.raises(ValidationError, match="Invalid run status"):
            await dispatch(context, GetRunsByStatus(status="invalid_status_xyz", skip=0, take=10))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("skip,take,message", [
        (-1, 10, "Skip cannot be negative"),
        (0, 0, "Take must be between 1 and 100"),
        (0, 101, "Take must be between 1 and 100"),
    ])
    async def test_pagination_bounds(self, context, skip, take, message):
        with pytest.raises(ValidationError, match=message):
            await dispatch(context, GetRunsByAppId(app_id=str(uuid4()), skip=skip, take=take))


class TestDispatch:
    @pytest.mark.asyncio
    async def test_unknown_command(self, context):
        with pytest.raises(TypeError, match="No handler registered for str"):
            await dispatch(context, "CreateRun")
