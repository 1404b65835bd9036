"""Task repository for rule-materialized tasks."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scrumflow.application.dtos.task import TaskResult
from scrumflow.infrastructure.persistence.models.task import Task
from scrumflow.shared.enums import TaskStatus
from scrumflow.shared.utils.datetime import ensure_utc


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        project_id=t.project_id,
        type_id=t.type_id,
        title=t.title,
        description=t.description,
        priority=t.priority,
        status=t.status,
        created_by=t.created_by,
        card_id=t.card_id,
        created_at=ensure_utc(t.created_at),
    )


class TaskRepository:
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(
        self,
        project_id: str,
        type_id: str,
        title: str,
        *,
        description: str | None = None,
        priority: int = 3,
        status: str = TaskStatus.AVAILABLE.value,
        created_by: str | None = None,
        card_id: str | None = None,
    ) -> TaskResult:
        """Create a task and return the result DTO."""
        task = Task(
            project_id=project_id,
            type_id=type_id,
            title=title,
            description=description,
            priority=priority,
            status=status,
            created_by=created_by,
            card_id=card_id,
        )
        self.db.add(task)
        await self.db.flush()
        await self.db.refresh(task)
        return _to_result(task)

    async def list_for_project(self, project_id: str) -> list[TaskResult]:
        result = await self.db.execute(
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(Task.created_at.asc(), Task.id.asc())
        )
        return [_to_result(t) for t in result.scalars().all()]

    async def count_for_project(self, project_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Task.id)).where(Task.project_id == project_id)
        )
        return result.scalar_one() or 0
