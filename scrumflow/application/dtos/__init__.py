"""Application DTOs: plain dataclasses passed across layers."""

from scrumflow.application.dtos.rule_execution import (
    RuleExecutionListItem,
    RuleExecutionResult,
    RuleMetrics,
)
from scrumflow.application.dtos.rule_result import (
    Applied,
    Failed,
    RuleOutcomeVariant,
    RuleResult,
    Suppressed,
)
from scrumflow.application.dtos.state_change import StateChangeEvent
from scrumflow.application.dtos.task import TaskResult, TaskTemplateResult

__all__ = [
    "Applied",
    "Failed",
    "RuleExecutionListItem",
    "RuleExecutionResult",
    "RuleMetrics",
    "RuleOutcomeVariant",
    "RuleResult",
    "StateChangeEvent",
    "Suppressed",
    "TaskResult",
    "TaskTemplateResult",
]
