"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from scrumflow.application.dtos.rule_execution import (
        RuleExecutionListItem,
        RuleExecutionResult,
        RuleMetrics,
    )
    from scrumflow.application.dtos.task import TaskResult, TaskTemplateResult
    from scrumflow.domain.entities.workflow import WorkflowEntity


class IWorkflowRepository(Protocol):
    """Protocol for reading workflow/rule configuration."""

    async def get_for_project(self, project_id: str) -> list[WorkflowEntity]:
        """Return the project's workflows (active or not) with their rules."""


class IRuleExecutionRepository(Protocol):
    """Protocol for the append-only rule execution ledger."""

    async def try_record(
        self,
        rule_id: str,
        origin_type: str,
        origin_id: str,
        *,
        user_id: str | None,
        outcome: str = "applied",
        suppression_reason: str | None = None,
    ) -> RuleExecutionResult | None:
        """Atomically insert a ledger row; return None if the key already exists."""

    async def get(
        self, rule_id: str, origin_type: str, origin_id: str
    ) -> RuleExecutionResult | None:
        """Return the ledger row for (rule, origin), or None."""

    async def list_for_rule(
        self,
        rule_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[RuleExecutionListItem]:
        """Return ledger rows for a rule, newest first."""

    async def count_for_rule(
        self,
        rule_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        """Return the number of ledger rows for a rule (for pagination)."""

    async def metrics_for_rule(
        self,
        rule_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> RuleMetrics | None:
        """Return outcome counts for a rule, or None if the rule does not exist."""


class ITaskTemplateRepository(Protocol):
    """Protocol for reading the templates attached to a rule."""

    async def get_for_rule(self, rule_id: str) -> list[TaskTemplateResult]:
        """Return templates attached to the rule in execution order."""


class ITaskRepository(Protocol):
    """Protocol for creating tasks."""

    async def create(
        self,
        project_id: str,
        type_id: str,
        title: str,
        *,
        description: str | None = None,
        priority: int = 3,
        status: str = "available",
        created_by: str | None = None,
        card_id: str | None = None,
    ) -> TaskResult:
        """Create a task and return the result DTO."""
