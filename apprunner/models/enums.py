"""
Enumeration types used across the application.
"""

from enum import Enum


class RunStatus(str, Enum):
    """Run lifecycle status"""
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCESS = "Success"
    FAILURE = "Failure"
    INVALID_CONFIGURATION = "InvalidConfiguration"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.SUCCESS, RunStatus.FAILURE, RunStatus.INVALID_CONFIGURATION)


class HttpMethod(str, Enum):
    """HTTP methods an app may use"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class ResourceKind(str, Enum):
    """What a resource connects to"""
    HTTP = "http"
    SQL = "sql"


class DatabaseEngine(str, Enum):
    """Supported database engines for SQL resources"""
    POSTGRES = "postgres"


class DatabaseAuthScheme(str, Enum):
    """How a SQL resource authenticates"""
    USERNAME_PASSWORD = "username_password"


class InputKind(str, Enum):
    """Discriminator for app input types"""
    TEXT = "text"
    EMAIL = "email"
    DATE = "date"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    RADIO = "radio"


class SqlQueryMode(str, Enum):
    """How an app's SQL query is authored"""
    GUI = "gui"
    RAW = "raw"


class SqlFilterOperator(str, Enum):
    """Filter operators available in GUI query mode"""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    LIKE = "like"
    ILIKE = "ilike"
    IN = "in"
    NOT_IN = "not_in"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


class SqlSortDirection(str, Enum):
    """ORDER BY direction"""
    ASC = "asc"
    DESC = "desc"


class DashboardBindingSourceType(str, Enum):
    """Where a dashboard binding takes its value from"""
    LOAD_INPUT = "load_input"
    ACTION_INPUT = "action_input"
    PREPARE_OUTPUT = "prepare_output"
    LITERAL = "literal"
    PREVIOUS_ACTION_OUTPUT = "previous_action_output"
