"""Task template repository: templates attached to rules."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scrumflow.application.dtos.task import TaskTemplateResult
from scrumflow.infrastructure.persistence.models.task import TaskTemplate
from scrumflow.infrastructure.persistence.models.workflow import RuleTemplate
from scrumflow.infrastructure.persistence.repositories.base import BaseRepository
from scrumflow.shared.utils.datetime import utc_now


def _to_result(t: TaskTemplate, execution_order: int = 0) -> TaskTemplateResult:
    return TaskTemplateResult(
        id=t.id,
        org_id=t.org_id,
        project_id=t.project_id,
        name=t.name,
        description=t.description,
        type_id=t.type_id,
        priority=t.priority,
        execution_order=execution_order,
        is_deleted=t.deleted_at is not None,
    )


class TaskTemplateRepository(BaseRepository[TaskTemplate]):
    """Task template repository. Implements ITaskTemplateRepository."""

    resource_name = "task_template"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, TaskTemplate)

    async def get_for_rule(self, rule_id: str) -> list[TaskTemplateResult]:
        """Return the rule's templates by execution_order, then template id.

        Soft-deleted templates are included (flagged is_deleted) so the
        caller can report the broken link instead of silently skipping it.
        """
        result = await self.db.execute(
            select(TaskTemplate, RuleTemplate.execution_order)
            .join(RuleTemplate, RuleTemplate.template_id == TaskTemplate.id)
            .where(RuleTemplate.rule_id == rule_id)
            .order_by(RuleTemplate.execution_order.asc(), TaskTemplate.id.asc())
        )
        return [_to_result(t, order) for t, order in result.all()]

    async def create_template(
        self,
        org_id: str,
        project_id: str,
        name: str,
        type_id: str,
        *,
        description: str | None = None,
        priority: int = 3,
        created_by: str | None = None,
    ) -> TaskTemplateResult:
        template = await self.create(
            TaskTemplate(
                org_id=org_id,
                project_id=project_id,
                name=name,
                description=description,
                type_id=type_id,
                priority=priority,
                created_by=created_by,
            )
        )
        return _to_result(template)

    async def soft_delete(self, template_id: str) -> None:
        template = await self.get_by_id_or_raise(template_id)
        template.deleted_at = utc_now()
        await self.save(template)
