"""Workflow and rule domain entities.

A workflow is a named, project-scoped container of rules that can be
switched on and off as a whole. A rule is a single trigger condition
(resource type, optional task type, target state) bound to templates.
"""

from dataclasses import dataclass, field

from scrumflow.shared.enums import ResourceType


@dataclass
class RuleEntity:
    """Domain entity for an automation rule."""

    id: str
    workflow_id: str
    name: str
    goal: str | None
    resource_type: ResourceType
    task_type_id: str | None
    to_state: str
    is_active: bool

    def can_trigger_on(
        self,
        resource_type: ResourceType,
        to_state: str,
        task_type_id: str | None,
    ) -> bool:
        """Return whether this rule is active and matches the transition.

        An absent task_type_id filter matches any task type; a present
        filter must equal the event's task type exactly.
        """
        if not self.is_active:
            return False
        if self.resource_type != resource_type or self.to_state != to_state:
            return False
        return self.task_type_id is None or self.task_type_id == task_type_id


@dataclass
class WorkflowEntity:
    """Domain entity for a workflow (container of rules)."""

    id: str
    org_id: str
    project_id: str
    name: str
    is_active: bool
    rules: list[RuleEntity] = field(default_factory=list)

    def applies_to(self, project_id: str) -> bool:
        """Return whether this workflow is active and scoped to the project."""
        return self.is_active and self.project_id == project_id
