"""
Core Exceptions

Domain errors raised by the run engine and its command handlers.

ValidationError and NotFoundError short-circuit a command before any run is
persisted. Configuration defects and dispatch failures are not exceptions:
they end up as a persisted run with a terminal status.
"""


class DomainError(Exception):
    """Base class for run engine errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """
    Raised for caller-fixable problems.

    Examples: malformed IDs, missing required inputs, bad pagination,
    prior action run IDs on a dashboard action.
    """


class NotFoundError(DomainError):
    """Raised when a referenced app, resource, run, dashboard or action is absent."""


class ConflictError(DomainError):
    """Raised when a run was modified concurrently since it was loaded."""


class InvalidOperationError(DomainError):
    """Raised when an operation is not legal for the current domain state."""
