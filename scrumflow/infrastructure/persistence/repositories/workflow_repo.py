"""Workflow and Rule configuration repository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scrumflow.domain.entities.workflow import RuleEntity, WorkflowEntity
from scrumflow.domain.exceptions import ResourceNotFoundException, ValidationException
from scrumflow.infrastructure.persistence.models.workflow import (
    Rule,
    RuleTemplate,
    Workflow,
)
from scrumflow.infrastructure.persistence.repositories.base import BaseRepository
from scrumflow.shared.enums import ResourceType


def _rule_to_entity(r: Rule) -> RuleEntity:
    return RuleEntity(
        id=r.id,
        workflow_id=r.workflow_id,
        name=r.name,
        goal=r.goal,
        resource_type=ResourceType(r.resource_type),
        task_type_id=r.task_type_id,
        to_state=r.to_state,
        is_active=r.is_active,
    )


def _workflow_to_entity(w: Workflow) -> WorkflowEntity:
    return WorkflowEntity(
        id=w.id,
        org_id=w.org_id,
        project_id=w.project_id,
        name=w.name,
        is_active=w.is_active,
        rules=[_rule_to_entity(r) for r in w.rules],
    )


class WorkflowRepository(BaseRepository[Workflow]):
    """Workflow repository. Implements IWorkflowRepository plus config writes."""

    resource_name = "workflow"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Workflow)

    async def get_for_project(self, project_id: str) -> list[WorkflowEntity]:
        """Return the project's non-deleted workflows (active or not) with rules."""
        result = await self.db.execute(
            select(Workflow)
            .where(
                Workflow.project_id == project_id,
                Workflow.deleted_at.is_(None),
            )
            .options(selectinload(Workflow.rules))
            .order_by(Workflow.id.asc())
        )
        return [_workflow_to_entity(w) for w in result.scalars().all()]

    async def get_rule(self, rule_id: str) -> RuleEntity | None:
        rule = await self.db.get(Rule, rule_id)
        return _rule_to_entity(rule) if rule else None

    async def create_workflow(
        self,
        org_id: str,
        project_id: str,
        name: str,
        *,
        description: str | None = None,
        is_active: bool = False,
        created_by: str | None = None,
    ) -> WorkflowEntity:
        """Create a workflow (inactive by default); return the entity."""
        workflow = await self.create(
            Workflow(
                org_id=org_id,
                project_id=project_id,
                name=name,
                description=description,
                is_active=is_active,
                created_by=created_by,
            )
        )
        return WorkflowEntity(
            id=workflow.id,
            org_id=workflow.org_id,
            project_id=workflow.project_id,
            name=workflow.name,
            is_active=workflow.is_active,
        )

    async def set_workflow_active(self, workflow_id: str, is_active: bool) -> None:
        workflow = await self.get_by_id_or_raise(workflow_id)
        workflow.is_active = is_active
        await self.save(workflow)

    async def create_rule(
        self,
        workflow_id: str,
        name: str,
        resource_type: ResourceType,
        to_state: str,
        *,
        goal: str | None = None,
        task_type_id: str | None = None,
        is_active: bool = True,
    ) -> RuleEntity:
        """Create a rule in an existing workflow; return the entity.

        Raises ValidationException when a card rule carries a task type
        filter, since card events never have one.
        """
        resource_type = ResourceType(resource_type)
        if resource_type != ResourceType.TASK and task_type_id is not None:
            raise ValidationException(
                "task_type_id only applies to task rules", field="task_type_id"
            )
        await self.get_by_id_or_raise(workflow_id)
        rule = Rule(
            workflow_id=workflow_id,
            name=name,
            goal=goal,
            resource_type=resource_type.value,
            task_type_id=task_type_id,
            to_state=to_state,
            is_active=is_active,
        )
        self.db.add(rule)
        await self.db.flush()
        await self.db.refresh(rule)
        return _rule_to_entity(rule)

    async def set_rule_active(self, rule_id: str, is_active: bool) -> None:
        rule = await self.db.get(Rule, rule_id)
        if rule is None:
            raise ResourceNotFoundException("rule", rule_id)
        rule.is_active = is_active
        await self.db.flush()

    async def attach_template(
        self, rule_id: str, template_id: str, execution_order: int = 0
    ) -> None:
        """Attach a template to a rule, or update its execution order."""
        link = await self.db.get(RuleTemplate, (rule_id, template_id))
        if link is None:
            self.db.add(
                RuleTemplate(
                    rule_id=rule_id,
                    template_id=template_id,
                    execution_order=execution_order,
                )
            )
        else:
            link.execution_order = execution_order
        await self.db.flush()
