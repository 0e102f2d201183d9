"""
Dashboard Repository
"""

from uuid import UUID

from sqlalchemy import select

from apprunner.models import Dashboard, DashboardDefinition
from apprunner.repositories.base import BaseRepository


class DashboardRepository(BaseRepository[Dashboard]):
    """Repository for dashboards."""

    model = Dashboard

    async def get_by_id(self, dashboard_id: UUID) -> DashboardDefinition | None:
        """Get a non-deleted dashboard by ID."""
        result = await self.session.execute(
            select(Dashboard).where(
                Dashboard.id == dashboard_id,
                Dashboard.is_deleted.is_(False),
            )
        )
        dashboard = result.scalar_one_or_none()
        return DashboardDefinition.model_validate(dashboard) if dashboard else None
