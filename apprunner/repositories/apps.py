"""
App Repository

Read access to app definitions for the run engine.
"""

from uuid import UUID

from sqlalchemy import select

from apprunner.models import App, AppDefinition, Input, KeyValuePair, SqlQueryConfig
from apprunner.repositories.base import BaseRepository


class AppRepository(BaseRepository[App]):
    """Repository for apps."""

    model = App

    async def get_by_id(self, app_id: UUID) -> AppDefinition | None:
        """Get a non-deleted app by ID."""
        result = await self.session.execute(
            select(App).where(App.id == app_id, App.is_deleted.is_(False))
        )
        app = result.scalar_one_or_none()
        return self._to_pydantic(app) if app else None

    def _to_pydantic(self, app: App) -> AppDefinition:
        """Convert SQLAlchemy model to Pydantic model."""
        return AppDefinition(
            id=app.id,
            name=app.name,
            folder_id=app.folder_id,
            resource_id=app.resource_id,
            http_method=app.http_method,
            inputs=[Input.model_validate(i) for i in app.inputs or []],
            url_path=app.url_path,
            url_parameters=[KeyValuePair.model_validate(p) for p in app.url_parameters or []],
            headers=[KeyValuePair.model_validate(h) for h in app.headers or []],
            body=[KeyValuePair.model_validate(b) for b in app.body or []],
            use_dynamic_json_body=app.use_dynamic_json_body,
            sql_config=SqlQueryConfig.model_validate(app.sql_config) if app.sql_config else None,
            description=app.description,
            is_deleted=app.is_deleted,
            created_at=app.created_at,
            updated_at=app.updated_at,
        )
