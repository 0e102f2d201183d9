"""
Resource Repository

Read access to resources for the run engine.
"""

from uuid import UUID

from sqlalchemy import select

from apprunner.models import Resource, ResourceDefinition
from apprunner.repositories.base import BaseRepository


class ResourceRepository(BaseRepository[Resource]):
    """Repository for resources."""

    model = Resource

    async def get_by_id(self, resource_id: UUID) -> ResourceDefinition | None:
        """Get a non-deleted resource by ID."""
        result = await self.session.execute(
            select(Resource).where(
                Resource.id == resource_id,
                Resource.is_deleted.is_(False),
            )
        )
        resource = result.scalar_one_or_none()
        if not resource:
            return None
        # Key/value lists and sql_schema are plain JSON; pydantic validates them
        return ResourceDefinition.model_validate(resource)
