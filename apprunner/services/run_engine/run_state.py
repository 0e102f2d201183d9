"""
Run status state machine.

    Pending --> Running --> Success | Failure
    Pending --> InvalidConfiguration

Terminal states are never left. Transitions return a new RunRecord; the
caller persists it.
"""

import logging
from datetime import datetime, timezone

from apprunner.core.exceptions import InvalidOperationError, ValidationError
from apprunner.models.contracts import ExecutableHttpRequest, RunRecord, SqlQuery
from apprunner.models.enums import RunStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.PENDING: frozenset({RunStatus.RUNNING, RunStatus.INVALID_CONFIGURATION}),
    RunStatus.RUNNING: frozenset({RunStatus.SUCCESS, RunStatus.FAILURE}),
    RunStatus.SUCCESS: frozenset(),
    RunStatus.FAILURE: frozenset(),
    RunStatus.INVALID_CONFIGURATION: frozenset(),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_run_status(value: str) -> RunStatus:
    """
    Match a status name case-insensitively (``pending``, ``Success``,
    ``invalid_configuration``...).

    Raises:
        ValidationError: If the name matches no status
    """
    normalized = value.strip().replace("_", "").lower()
    for status in RunStatus:
        if status.value.lower() == normalized:
            return status
    raise ValidationError(f"Invalid run status: {value}")


def can_transition(current: RunStatus, target: RunStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def transition(run: RunRecord, target: RunStatus, **changes) -> RunRecord:
    """
    Move a run to ``target``, applying ``changes`` to the copy.

    Raises:
        InvalidOperationError: If the transition is not allowed
    """
    if not can_transition(run.status, target):
        raise InvalidOperationError(
            f"Cannot transition run {run.id} from {run.status.value} to {target.value}"
        )
    logger.info(f"Run {run.id}: {run.status.value} -> {target.value}")
    return run.model_copy(update={"status": target, **changes})


def mark_running(
    run: RunRecord,
    executable_request: ExecutableHttpRequest | None = None,
    executed_sql: SqlQuery | None = None,
) -> RunRecord:
    """Record the resolved request and stamp the dispatch start."""
    return transition(
        run,
        RunStatus.RUNNING,
        executable_request=executable_request,
        executed_sql=executed_sql,
        started_at=_now(),
    )


def mark_success(run: RunRecord, response: str) -> RunRecord:
    return transition(run, RunStatus.SUCCESS, response=response, completed_at=_now())


def mark_failure(run: RunRecord, error_message: str, response: str | None = None) -> RunRecord:
    return transition(
        run,
        RunStatus.FAILURE,
        error_message=error_message,
        response=response,
        completed_at=_now(),
    )


def mark_invalid_configuration(run: RunRecord, error_message: str) -> RunRecord:
    """Terminal without dispatch; no request is ever attached."""
    return transition(
        run,
        RunStatus.INVALID_CONFIGURATION,
        error_message=error_message,
        executable_request=None,
        executed_sql=None,
        completed_at=_now(),
    )
