"""
In-memory stand-ins for repositories and dispatch services.

They honour the same contracts as the SQLAlchemy repositories (soft-delete
filtering, version checks on update, newest-first paging) so handler tests
can exercise the full pipeline without a database.
"""

from uuid import UUID

import httpx

from apprunner.core.exceptions import ConflictError, NotFoundError
from apprunner.models.contracts import (
    AppDefinition,
    DashboardDefinition,
    ResourceDefinition,
    RunRecord,
    SqlQuery,
)
from apprunner.models.enums import RunStatus
from apprunner.services.run_engine import DispatchOutcome


class InMemoryAppRepository:
    def __init__(self, *apps: AppDefinition):
        self.items: dict[UUID, AppDefinition] = {a.id: a for a in apps}

    def put(self, app: AppDefinition) -> AppDefinition:
        self.items[app.id] = app
        return app

    async def get_by_id(self, app_id: UUID) -> AppDefinition | None:
        app = self.items.get(app_id)
        return None if app is None or app.is_deleted else app


class InMemoryResourceRepository:
    def __init__(self, *resources: ResourceDefinition):
        self.items: dict[UUID, ResourceDefinition] = {r.id: r for r in resources}

    def put(self, resource: ResourceDefinition) -> ResourceDefinition:
        self.items[resource.id] = resource
        return resource

    async def get_by_id(self, resource_id: UUID) -> ResourceDefinition | None:
        resource = self.items.get(resource_id)
        return None if resource is None or resource.is_deleted else resource


class InMemoryDashboardRepository:
    def __init__(self, *dashboards: DashboardDefinition):
        self.items: dict[UUID, DashboardDefinition] = {d.id: d for d in dashboards}

    def put(self, dashboard: DashboardDefinition) -> DashboardDefinition:
        self.items[dashboard.id] = dashboard
        return dashboard

    async def get_by_id(self, dashboard_id: UUID) -> DashboardDefinition | None:
        dashboard = self.items.get(dashboard_id)
        return None if dashboard is None or dashboard.is_deleted else dashboard


class InMemoryRunRepository:
    """Stores runs and keeps every persisted status in ``history``."""

    def __init__(self, *runs: RunRecord):
        self.items: dict[UUID, RunRecord] = {r.id: r for r in runs}
        self.history: dict[UUID, list[RunStatus]] = {r.id: [r.status] for r in runs}

    async def add(self, run: RunRecord) -> RunRecord:
        stored = run.model_copy(update={"version": 1})
        self.items[run.id] = stored
        self.history[run.id] = [stored.status]
        return stored

    async def update(self, run: RunRecord) -> RunRecord:
        current = self.items.get(run.id)
        if current is None or current.is_deleted:
            raise NotFoundError(f"Run {run.id} not found")
        if current.version != run.version:
            raise ConflictError(f"Run {run.id} was modified concurrently")
        stored = run.model_copy(update={"version": run.version + 1})
        self.items[run.id] = stored
        self.history[run.id].append(stored.status)
        return stored

    async def get_by_id(self, run_id: UUID) -> RunRecord | None:
        run = self.items.get(run_id)
        return None if run is None or run.is_deleted else run

    async def get_by_app_id(self, app_id, skip, take):
        return self._page(lambda r: r.app_id == app_id, skip, take)

    async def get_by_status(self, status, skip, take):
        return self._page(lambda r: r.status == status, skip, take)

    async def get_by_app_id_and_status(self, app_id, status, skip, take):
        return self._page(lambda r: r.app_id == app_id and r.status == status, skip, take)

    def _page(self, predicate, skip: int, take: int) -> tuple[list[RunRecord], int]:
        matching = [r for r in self.items.values() if not r.is_deleted and predicate(r)]
        matching.sort(key=lambda r: (r.created_at, str(r.id)), reverse=True)
        return matching[skip:skip + take], len(matching)


class FakeSqlExecutionService:
    """Records queries and returns a canned outcome."""

    def __init__(self, outcome: DispatchOutcome | None = None):
        self.outcome = outcome or DispatchOutcome.ok("[]")
        self.calls: list[tuple[ResourceDefinition, SqlQuery]] = []

    async def execute_query(
        self, resource: ResourceDefinition, query: SqlQuery
    ) -> DispatchOutcome:
        self.calls.append((resource, query))
        return self.outcome


class HttpStub:
    """
    Scripted HTTP backend for httpx.MockTransport.

    Every request is recorded. The response is taken from ``status_code``
    and ``text`` unless ``error`` is set, in which case it is raised.
    """

    def __init__(self, status_code: int = 200, text: str = '{"ok": true}'):
        self.status_code = status_code
        self.text = text
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.text)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]
