"""
Base Repository

Generic async repository over one ORM model. Subclasses set ``model`` and
add their own query methods.
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from apprunner.models.orm import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Common CRUD helpers shared by all repositories."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_row(self, entity_id: UUID) -> ModelT | None:
        """Get a row by primary key."""
        return await self.session.get(self.model, entity_id)

    async def create(self, entity: ModelT) -> ModelT:
        """Add a new row and flush it so defaults are populated."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity
