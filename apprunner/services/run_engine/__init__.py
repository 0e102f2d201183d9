"""
Run engine: validation, templating, composition, dispatch and status
tracking for app runs.
"""

from apprunner.services.run_engine.executor import RunExecutor
from apprunner.services.run_engine.http_executor import HttpExecutor
from apprunner.services.run_engine.input_validation import validate_inputs
from apprunner.services.run_engine.outcomes import DispatchOutcome
from apprunner.services.run_engine.request_composer import (
    ComposedRequest,
    CompositionError,
    RequestComposer,
    apply_default_values,
    check_input_types,
)
from apprunner.services.run_engine.run_state import parse_run_status
from apprunner.services.run_engine.sql_execution import (
    PostgresSqlExecutionService,
    SqlExecutionService,
)
from apprunner.services.run_engine.templating import (
    TemplateContext,
    TemplateResult,
    resolve_template,
)

__all__ = [
    "ComposedRequest",
    "CompositionError",
    "DispatchOutcome",
    "HttpExecutor",
    "PostgresSqlExecutionService",
    "RequestComposer",
    "RunExecutor",
    "SqlExecutionService",
    "TemplateContext",
    "TemplateResult",
    "apply_default_values",
    "check_input_types",
    "parse_run_status",
    "resolve_template",
    "validate_inputs",
]
