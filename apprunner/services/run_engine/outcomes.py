"""
Dispatch outcome shared by the HTTP and SQL executors.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one dispatch attempt."""
    success: bool
    response: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls, response: str) -> "DispatchOutcome":
        return cls(success=True, response=response)

    @classmethod
    def failed(cls, error_message: str, response: str | None = None) -> "DispatchOutcome":
        return cls(success=False, response=response, error_message=error_message)
