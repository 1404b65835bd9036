"""Project-name and user-email lookups. Implements IDirectoryLookup."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scrumflow.infrastructure.persistence.models.directory import AppUser, Project


class DirectoryRepository:
    """Read-only lookups over the project and app_user tables."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_project_name(self, project_id: str) -> str | None:
        result = await self.db.execute(
            select(Project.name).where(Project.id == project_id)
        )
        return result.scalar_one_or_none()

    async def get_user_email(self, user_id: str) -> str | None:
        result = await self.db.execute(
            select(AppUser.email).where(AppUser.id == user_id)
        )
        return result.scalar_one_or_none()
