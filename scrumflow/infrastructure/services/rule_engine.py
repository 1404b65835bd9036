"""Rule engine: evaluates automation rules for a committed state change (implements IRuleEngine)."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from scrumflow.application.dtos.rule_result import (
    Applied,
    Failed,
    RuleResult,
    Suppressed,
)
from scrumflow.application.services.rule_matcher import RuleMatcher
from scrumflow.application.services.variable_resolver import VariableContext
from scrumflow.core.config import get_settings
from scrumflow.domain.exceptions import AutomationException, RuleConfigurationException
from scrumflow.infrastructure.persistence.repositories.directory_repo import (
    DirectoryRepository,
)
from scrumflow.infrastructure.persistence.repositories.rule_execution_repo import (
    RuleExecutionRepository,
)
from scrumflow.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowRepository,
)
from scrumflow.infrastructure.services.template_materializer import (
    TemplateMaterializer,
)
from scrumflow.shared.enums import SuppressionReason
from scrumflow.shared.telemetry.logging import get_logger
from scrumflow.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from scrumflow.application.dtos.state_change import StateChangeEvent
    from scrumflow.application.interfaces.repositories import (
        IRuleExecutionRepository,
        IWorkflowRepository,
    )
    from scrumflow.application.interfaces.services import IDirectoryLookup
    from scrumflow.domain.entities.workflow import RuleEntity

logger = get_logger(__name__)

PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class RuleEngine:
    """Matches rules for an event and applies each one exactly once per origin.

    Every candidate rule runs in its own session and transaction: the ledger
    row and the rule's tasks commit together or not at all, and a failing
    rule never rolls back a sibling. Duplicate or concurrent deliveries are
    resolved by the ledger's unique key, not by locks.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        matcher: RuleMatcher | None = None,
        materializer: TemplateMaterializer | None = None,
        directory_factory: Callable[[AsyncSession], IDirectoryLookup] | None = None,
        workflow_repository_factory: (
            Callable[[AsyncSession], IWorkflowRepository] | None
        ) = None,
        ledger_factory: Callable[[AsyncSession], IRuleExecutionRepository] | None = None,
    ) -> None:
        """Wire the engine; omitted collaborators default to the SQL implementations.

        Without an explicit materializer, title length and initial task
        status come from get_settings().
        """
        self._session_factory = session_factory
        self._matcher = matcher or RuleMatcher()
        self._materializer = materializer or TemplateMaterializer.from_settings(
            get_settings()
        )
        self._directory_factory = directory_factory or DirectoryRepository
        self._workflow_repository_factory = (
            workflow_repository_factory or WorkflowRepository
        )
        self._ledger_factory = ledger_factory or RuleExecutionRepository

    @traced("rule_engine.evaluate")
    async def evaluate(self, event: StateChangeEvent) -> list[RuleResult]:
        """Evaluate the event and return one result per candidate rule, in match order.

        Raises AutomationException after all candidates were attempted when
        any of them hit a persistence failure; its results attribute holds
        the full ordered list.
        """
        add_span_attributes(
            **{
                "rule_engine.origin_type": event.origin_type,
                "rule_engine.origin_id": event.resource_id,
                "rule_engine.to_state": event.to_state,
                "rule_engine.user_triggered": event.user_triggered,
            }
        )
        if not self._matcher.is_evaluable(event):
            logger.debug(
                "Skipping rules for system transition of %s %s",
                event.origin_type,
                event.resource_id,
            )
            return []

        try:
            candidates, context = await self._load_candidates(event)
        except SQLAlchemyError as e:
            logger.exception(
                "Could not load rules for %s %s (project_id=%s)",
                event.origin_type,
                event.resource_id,
                event.project_id,
            )
            raise AutomationException(
                event.origin_type, event.resource_id, [], [(None, str(e))]
            ) from e

        if not candidates:
            return []

        results: list[RuleResult] = []
        failures: list[tuple[str | None, str]] = []
        for rule in candidates:
            try:
                result = await self._apply_rule(rule, event, context)
            except RuleConfigurationException as e:
                logger.warning(
                    "Rule %s not applied to %s %s: %s",
                    rule.id,
                    event.origin_type,
                    event.resource_id,
                    e.message,
                )
                result = RuleResult(rule.id, Failed(e.error_code, e.message))
            except SQLAlchemyError as e:
                logger.exception(
                    "Rule %s failed for %s %s (project_id=%s)",
                    rule.id,
                    event.origin_type,
                    event.resource_id,
                    event.project_id,
                )
                failures.append((rule.id, str(e)))
                result = RuleResult(rule.id, Failed(PERSISTENCE_ERROR, str(e)))
            results.append(result)

        add_span_attributes(
            **{
                "rule_engine.candidates": len(candidates),
                "rule_engine.applied": sum(1 for r in results if r.applied),
                "rule_engine.failed": sum(1 for r in results if r.failed),
            }
        )
        if failures:
            raise AutomationException(
                event.origin_type, event.resource_id, results, failures
            )
        return results

    async def _load_candidates(
        self, event: StateChangeEvent
    ) -> tuple[list[RuleEntity], VariableContext | None]:
        """Read configuration, match, and resolve lookups in one read-only session."""
        async with self._session_factory() as session:
            workflow_repo = self._workflow_repository_factory(session)
            workflows = await workflow_repo.get_for_project(event.project_id)
            candidates = self._matcher.match(event, workflows)
            if not candidates:
                return [], None
            directory = self._directory_factory(session)
            project_name = await directory.get_project_name(event.project_id)
            user_email = await directory.get_user_email(event.user_id)
        if project_name is None:
            logger.warning("No project name for project_id=%s", event.project_id)
        if user_email is None:
            logger.warning("No email for user_id=%s", event.user_id)
        context = VariableContext.from_event(
            event, project_name=project_name, user_email=user_email
        )
        return candidates, context

    async def _apply_rule(
        self,
        rule: RuleEntity,
        event: StateChangeEvent,
        context: VariableContext,
    ) -> RuleResult:
        """Record the ledger row and materialize tasks in a single transaction."""
        async with self._session_factory() as session:
            async with session.begin():
                execution = await self._ledger_factory(session).try_record(
                    rule.id,
                    event.origin_type,
                    event.resource_id,
                    user_id=event.user_id,
                )
                if execution is None:
                    tasks = None
                else:
                    tasks = await self._materializer.materialize(
                        session, rule, event, context
                    )

        if tasks is None:
            logger.info(
                "Rule %s already fired for %s %s; suppressed",
                rule.id,
                event.origin_type,
                event.resource_id,
            )
            return RuleResult(rule.id, Suppressed(SuppressionReason.IDEMPOTENT))
        logger.info(
            "Rule %s applied to %s %s: %d task(s) created",
            rule.id,
            event.origin_type,
            event.resource_id,
            len(tasks),
        )
        return RuleResult(
            rule.id, Applied(len(tasks)), task_ids=tuple(t.id for t in tasks)
        )
