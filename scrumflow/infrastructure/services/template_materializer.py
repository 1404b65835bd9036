"""Template materializer: turns a fired rule's templates into tasks."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from scrumflow.application.services.variable_resolver import resolve
from scrumflow.domain.exceptions import RuleConfigurationException
from scrumflow.infrastructure.persistence.models.task import TASK_TITLE_MAX_LENGTH
from scrumflow.infrastructure.persistence.repositories.task_repo import TaskRepository
from scrumflow.infrastructure.persistence.repositories.task_template_repo import (
    TaskTemplateRepository,
)
from scrumflow.shared.enums import ResourceType, TaskStatus
from scrumflow.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from scrumflow.application.dtos.state_change import StateChangeEvent
    from scrumflow.application.dtos.task import TaskResult, TaskTemplateResult
    from scrumflow.application.interfaces.repositories import (
        ITaskRepository,
        ITaskTemplateRepository,
    )
    from scrumflow.application.services.variable_resolver import VariableContext
    from scrumflow.core.config import Settings
    from scrumflow.domain.entities.workflow import RuleEntity

logger = get_logger(__name__)


class TemplateMaterializer:
    """Creates one task per attached template, in execution order.

    Runs inside the caller's transaction; it never commits. A configuration
    problem raises RuleConfigurationException so the whole rule rolls back.
    """

    def __init__(
        self,
        *,
        title_max_length: int = TASK_TITLE_MAX_LENGTH,
        default_status: str = TaskStatus.AVAILABLE.value,
        template_repository_factory: (
            Callable[[AsyncSession], ITaskTemplateRepository] | None
        ) = None,
        task_repository_factory: Callable[[AsyncSession], ITaskRepository] | None = None,
    ) -> None:
        self._title_max_length = min(title_max_length, TASK_TITLE_MAX_LENGTH)
        self._default_status = TaskStatus(default_status).value
        self._template_repository_factory = (
            template_repository_factory or TaskTemplateRepository
        )
        self._task_repository_factory = task_repository_factory or TaskRepository

    @classmethod
    def from_settings(cls, settings: Settings) -> TemplateMaterializer:
        return cls(
            title_max_length=settings.task_title_max_length,
            default_status=settings.default_task_status,
        )

    def _check_template(
        self, rule: RuleEntity, template: TaskTemplateResult, event: StateChangeEvent
    ) -> None:
        if template.is_deleted:
            raise RuleConfigurationException(
                rule.id, f"template {template.id} was deleted", template_id=template.id
            )
        if template.project_id != event.project_id:
            raise RuleConfigurationException(
                rule.id,
                f"template {template.id} belongs to project {template.project_id}",
                template_id=template.id,
            )

    def render_title(self, pattern: str, context: VariableContext) -> str:
        return resolve(pattern, context)[: self._title_max_length]

    async def materialize(
        self,
        session: AsyncSession,
        rule: RuleEntity,
        event: StateChangeEvent,
        context: VariableContext,
    ) -> list[TaskResult]:
        """Create the rule's tasks in the session's open transaction."""
        templates = await self._template_repository_factory(session).get_for_rule(
            rule.id
        )
        task_repo = self._task_repository_factory(session)
        card_id = (
            event.resource_id if event.resource_type == ResourceType.CARD else None
        )
        created: list[TaskResult] = []
        for template in templates:
            self._check_template(rule, template, event)
            title = self.render_title(template.name, context)
            if not title.strip():
                raise RuleConfigurationException(
                    rule.id,
                    f"template {template.id} renders an empty title",
                    template_id=template.id,
                )
            task = await task_repo.create(
                project_id=event.project_id,
                type_id=template.type_id,
                title=title,
                description=resolve(template.description, context) or None,
                priority=template.priority,
                status=self._default_status,
                created_by=event.user_id,
                card_id=card_id,
            )
            created.append(task)
        logger.debug(
            "Rule %s materialized %d task(s) from %d template(s)",
            rule.id,
            len(created),
            len(templates),
        )
        return created
