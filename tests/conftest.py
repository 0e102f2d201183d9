"""
Pytest fixtures for the run engine test suite.

Handler tests run against in-memory repositories and an httpx
MockTransport; nothing here touches a real database or network.
"""

import os
import sys

import pytest

# Make `tests.helpers` importable regardless of where pytest is invoked
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from apprunner.config import Settings  # noqa: E402
from apprunner.handlers import HandlerContext  # noqa: E402
from apprunner.services.run_engine import HttpExecutor  # noqa: E402
from tests.helpers.factories import make_user  # noqa: E402
from tests.helpers.fakes import (  # noqa: E402
    FakeSqlExecutionService,
    HttpStub,
    InMemoryAppRepository,
    InMemoryDashboardRepository,
    InMemoryResourceRepository,
    InMemoryRunRepository,
)


@pytest.fixture
def settings():
    return Settings(environment="testing", max_page_size=100)


@pytest.fixture
def current_user():
    return make_user()


@pytest.fixture
def apps():
    return InMemoryAppRepository()


@pytest.fixture
def resources():
    return InMemoryResourceRepository()


@pytest.fixture
def runs():
    return InMemoryRunRepository()


@pytest.fixture
def dashboards():
    return InMemoryDashboardRepository()


@pytest.fixture
def http_stub():
    return HttpStub()


@pytest.fixture
def sql_service():
    return FakeSqlExecutionService()


@pytest.fixture
def context(apps, resources, runs, dashboards, http_stub, sql_service, settings):
    """Handler context wired to in-memory fakes."""
    return HandlerContext(
        apps=apps,
        resources=resources,
        runs=runs,
        dashboards=dashboards,
        http_executor=HttpExecutor(timeout_seconds=5.0, transport=http_stub.transport),
        sql_service=sql_service,
        settings=settings,
    )
