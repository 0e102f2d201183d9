"""
Request composition.

Combines a resource (the floor) with an app (strictly additive overrides),
resolves templates against the run's input values and the current user,
and produces either an ExecutableHttpRequest or a parameterized SqlQuery.
"""

import logging
from dataclasses import dataclass

from apprunner.core.auth import CurrentUser
from apprunner.core.exceptions import ValidationError
from apprunner.models.contracts import (
    AppDefinition,
    ExecutableHttpRequest,
    Input,
    KeyValuePair,
    ResourceDefinition,
    RunInputValue,
    SqlQuery,
    SqlQueryConfig,
)
from apprunner.services.run_engine.sql_builder import SqlBuildError, build_sql_query
from apprunner.services.run_engine.templating import (
    TemplateContext,
    resolve_template,
)

logger = logging.getLogger(__name__)


class CompositionError(Exception):
    """
    Raised when an app cannot be composed into a request.

    This is a configuration defect, recorded on the run as
    InvalidConfiguration rather than returned to the caller.
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass(frozen=True)
class ComposedRequest:
    """Resolved dispatch target: exactly one of the two is set."""
    http_request: ExecutableHttpRequest | None = None
    sql_query: SqlQuery | None = None


# ==================== INPUT VALUES ====================


def apply_default_values(
    inputs: list[Input], submitted: list[RunInputValue]
) -> list[RunInputValue]:
    """Return submitted values plus defaults for declared inputs not submitted."""
    submitted_titles = {value.title for value in submitted}
    defaults = [
        RunInputValue(title=item.title, value=item.default_value)
        for item in inputs
        if item.default_value is not None and item.title not in submitted_titles
    ]
    return [*submitted, *defaults]


def check_input_types(inputs: list[Input], values: list[RunInputValue]) -> None:
    """
    Coerce every value against its declared input type.

    Raises:
        ValidationError: On the first value that does not fit its type
    """
    declared = {item.title: item for item in inputs}
    for value in values:
        item = declared.get(value.title)
        if item is None:
            continue
        try:
            item.type.coerce(value.value)
        except ValueError as e:
            raise ValidationError(f"Invalid value for input '{value.title}': {e}") from None


# ==================== COMPOSITION ====================


def join_url(base_url: str, path: str | None) -> str:
    if not path:
        return base_url
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class RequestComposer:
    """
    Composes apps into dispatchable requests.

    Composition is a pure function of (resource, app, input values, user):
    composing twice without intervening changes yields equal results.
    """

    def compose(
        self,
        app: AppDefinition,
        resource: ResourceDefinition,
        input_values: list[RunInputValue],
        current_user: CurrentUser | None = None,
        dynamic_body: list[KeyValuePair] | None = None,
    ) -> ComposedRequest:
        """
        Raises:
            CompositionError: If templates fail to resolve or the SQL
                configuration is invalid for the resource
        """
        context = TemplateContext.from_inputs(
            {v.title: v.value for v in input_values},
            app.inputs,
            current_user,
        )

        if app.sql_config is not None:
            return ComposedRequest(sql_query=self.compose_sql(app.sql_config, resource, context))
        return ComposedRequest(
            http_request=self.compose_http(app, resource, context, input_values, dynamic_body)
        )

    def compose_http(
        self,
        app: AppDefinition,
        resource: ResourceDefinition,
        context: TemplateContext,
        input_values: list[RunInputValue],
        dynamic_body: list[KeyValuePair] | None = None,
    ) -> ExecutableHttpRequest:
        if not resource.base_url:
            raise CompositionError([f"Resource '{resource.name}' has no base URL"])

        errors: list[str] = []

        def resolve(text: str) -> str:
            result = resolve_template(text, context)
            errors.extend(result.errors)
            return result.value

        def resolve_pairs(pairs: list[KeyValuePair]) -> list[KeyValuePair]:
            return [KeyValuePair(key=resolve(p.key), value=resolve(p.value)) for p in pairs]

        # Resource entries first; app entries are appended, duplicates kept
        base_url = resolve(join_url(resource.base_url, app.url_path))
        url_parameters = resolve_pairs([*resource.url_parameters, *app.url_parameters])
        headers = resolve_pairs([*resource.headers, *app.headers])

        if app.use_dynamic_json_body:
            if dynamic_body is not None:
                body = [KeyValuePair(key=p.key, value=p.value) for p in dynamic_body]
            else:
                body = [KeyValuePair(key=v.title, value=v.value) for v in input_values]
        else:
            body = resolve_pairs([*resource.body, *app.body])

        if errors:
            raise CompositionError(errors)

        return ExecutableHttpRequest(
            base_url=base_url,
            url_parameters=url_parameters,
            headers=headers,
            body=body,
            http_method=app.http_method,
            use_json_body=app.use_dynamic_json_body,
        )

    def compose_sql(
        self,
        config: SqlQueryConfig,
        resource: ResourceDefinition,
        context: TemplateContext,
    ) -> SqlQuery:
        if not resource.is_sql:
            raise CompositionError([f"Resource '{resource.name}' is not a SQL resource"])

        errors: list[str] = []

        def resolve(text: str | None) -> str | None:
            if text is None:
                return None
            result = resolve_template(text, context)
            errors.extend(result.errors)
            return result.value

        # Only values are templated; raw SQL text and identifiers never are
        resolved = config.model_copy(
            update={
                "filters": [
                    f.model_copy(update={"value": resolve(f.value)}) for f in config.filters
                ],
                "raw_sql_params": [
                    KeyValuePair(key=p.key, value=resolve(p.value) or "")
                    for p in config.raw_sql_params
                ],
            }
        )
        if errors:
            raise CompositionError(errors)

        try:
            return build_sql_query(resolved, resource.sql_schema)
        except SqlBuildError as e:
            raise CompositionError([str(e)]) from e
