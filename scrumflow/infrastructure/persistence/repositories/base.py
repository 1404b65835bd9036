"""Base repository: generic lookup and create/update for configuration models."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scrumflow.domain.exceptions import ResourceNotFoundException
from scrumflow.infrastructure.persistence.database import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository bound to one AsyncSession.

    The session's transaction is owned by the caller; methods only flush.
    """

    resource_name: str = "resource"

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def get_by_id_or_raise(self, entity_id: str) -> ModelType:
        """Return a record by primary key; raise ResourceNotFoundException if absent."""
        obj = await self.get_by_id(entity_id)
        if obj is None:
            raise ResourceNotFoundException(self.resource_name, entity_id)
        return obj

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and load server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def save(self, obj: ModelType) -> ModelType:
        """Flush changes to an attached record and reload it."""
        await self.db.flush()
        await self.db.refresh(obj)
        return obj
