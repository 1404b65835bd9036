"""Rule matcher: selects the rules a state change event should fire."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from scrumflow.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from scrumflow.application.dtos.state_change import StateChangeEvent
    from scrumflow.domain.entities.workflow import RuleEntity, WorkflowEntity

logger = get_logger(__name__)


class RuleMatcher:
    """Filters workflow rules down to the candidates for one event.

    A rule is a candidate when its workflow is active and scoped to the
    event's project, and the rule itself is active with matching resource
    type, target state and (if set) task type. Candidates are returned in
    ascending rule id order.
    """

    @staticmethod
    def is_evaluable(event: StateChangeEvent) -> bool:
        """System-generated transitions never trigger rules."""
        return event.user_triggered

    def match(
        self, event: StateChangeEvent, workflows: Iterable[WorkflowEntity]
    ) -> list[RuleEntity]:
        if not self.is_evaluable(event):
            return []
        candidates: dict[str, RuleEntity] = {}
        for workflow in workflows:
            if not workflow.applies_to(event.project_id):
                continue
            for rule in workflow.rules:
                if rule.workflow_id != workflow.id:
                    continue
                if rule.can_trigger_on(
                    event.resource_type, event.to_state, event.task_type_id
                ):
                    candidates[rule.id] = rule
        matched = [candidates[rule_id] for rule_id in sorted(candidates)]
        logger.debug(
            "Matched %d rule(s) for %s %s -> %s (project_id=%s)",
            len(matched),
            event.origin_type,
            event.resource_id,
            event.to_state,
            event.project_id,
        )
        return matched
