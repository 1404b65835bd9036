"""Rule execution ledger repository: idempotent recording and metrics reads."""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from scrumflow.application.dtos.rule_execution import (
    RuleExecutionListItem,
    RuleExecutionResult,
    RuleMetrics,
)
from scrumflow.domain.exceptions import UnsupportedDatabaseException
from scrumflow.infrastructure.persistence.models.directory import AppUser
from scrumflow.infrastructure.persistence.models.workflow import Rule, RuleExecution
from scrumflow.shared.enums import RuleOutcome
from scrumflow.shared.utils.datetime import ensure_utc
from scrumflow.shared.utils.generators import generate_cuid

# Dialect inserts that support ON CONFLICT ... DO NOTHING.
_CONFLICT_INSERTS: dict[str, Any] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

_LEDGER_KEY = ("rule_id", "origin_type", "origin_id")


def _to_result(row: Any) -> RuleExecutionResult:
    return RuleExecutionResult(
        id=row.id,
        rule_id=row.rule_id,
        origin_type=row.origin_type,
        origin_id=row.origin_id,
        outcome=row.outcome,
        suppression_reason=row.suppression_reason,
        user_id=row.user_id,
        created_at=ensure_utc(row.created_at),
    )


def _in_window(
    stmt: Select[Any], since: datetime | None, until: datetime | None
) -> Select[Any]:
    if since is not None:
        stmt = stmt.where(RuleExecution.created_at >= since)
    if until is not None:
        stmt = stmt.where(RuleExecution.created_at <= until)
    return stmt


class RuleExecutionRepository:
    """Ledger repository. Implements IRuleExecutionRepository.

    try_record is the only write: an INSERT ... ON CONFLICT DO NOTHING on the
    ledger key, so a duplicate or concurrent attempt for the same
    (rule, origin) returns None instead of a row. Other constraint
    violations (e.g. an unknown rule_id) still raise IntegrityError.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _conflict_insert(self) -> Any:
        dialect = self.db.get_bind().dialect.name
        try:
            return _CONFLICT_INSERTS[dialect]
        except KeyError:
            raise UnsupportedDatabaseException(dialect) from None

    async def try_record(
        self,
        rule_id: str,
        origin_type: str,
        origin_id: str,
        *,
        user_id: str | None,
        outcome: str = RuleOutcome.APPLIED.value,
        suppression_reason: str | None = None,
    ) -> RuleExecutionResult | None:
        """Insert the ledger row for (rule, origin); return None if it already exists."""
        insert = self._conflict_insert()
        stmt = (
            insert(RuleExecution)
            .values(
                id=generate_cuid(),
                rule_id=rule_id,
                origin_type=origin_type,
                origin_id=origin_id,
                outcome=RuleOutcome(outcome).value,
                suppression_reason=suppression_reason,
                user_id=user_id,
            )
            .on_conflict_do_nothing(index_elements=list(_LEDGER_KEY))
            .returning(
                RuleExecution.id,
                RuleExecution.rule_id,
                RuleExecution.origin_type,
                RuleExecution.origin_id,
                RuleExecution.outcome,
                RuleExecution.suppression_reason,
                RuleExecution.user_id,
                RuleExecution.created_at,
            )
        )
        result = await self.db.execute(stmt)
        row = result.first()
        return _to_result(row) if row is not None else None

    async def get(
        self, rule_id: str, origin_type: str, origin_id: str
    ) -> RuleExecutionResult | None:
        result = await self.db.execute(
            select(RuleExecution).where(
                RuleExecution.rule_id == rule_id,
                RuleExecution.origin_type == origin_type,
                RuleExecution.origin_id == origin_id,
            )
        )
        row = result.scalar_one_or_none()
        return _to_result(row) if row is not None else None

    async def list_for_rule(
        self,
        rule_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[RuleExecutionListItem]:
        """Return a page of executions for a rule, newest first."""
        stmt = (
            select(RuleExecution, AppUser.email)
            .outerjoin(AppUser, AppUser.id == RuleExecution.user_id)
            .where(RuleExecution.rule_id == rule_id)
        )
        stmt = _in_window(stmt, since, until)
        stmt = (
            stmt.order_by(RuleExecution.created_at.desc(), RuleExecution.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return [
            RuleExecutionListItem(
                id=execution.id,
                origin_type=execution.origin_type,
                origin_id=execution.origin_id,
                outcome=execution.outcome,
                suppression_reason=execution.suppression_reason,
                user_id=execution.user_id,
                user_email=email,
                created_at=ensure_utc(execution.created_at),
            )
            for execution, email in result.all()
        ]

    async def count_for_rule(
        self,
        rule_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        stmt = select(func.count(RuleExecution.id)).where(
            RuleExecution.rule_id == rule_id
        )
        result = await self.db.execute(_in_window(stmt, since, until))
        return result.scalar_one() or 0

    async def metrics_for_rule(
        self,
        rule_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> RuleMetrics | None:
        """Return evaluated/applied/suppressed counts with a per-reason breakdown."""
        rule_name = (
            await self.db.execute(select(Rule.name).where(Rule.id == rule_id))
        ).scalar_one_or_none()
        if rule_name is None:
            return None
        stmt = (
            select(
                RuleExecution.outcome,
                RuleExecution.suppression_reason,
                func.count(RuleExecution.id),
            )
            .where(RuleExecution.rule_id == rule_id)
            .group_by(RuleExecution.outcome, RuleExecution.suppression_reason)
        )
        result = await self.db.execute(_in_window(stmt, since, until))
        outcomes: Counter[str] = Counter()
        reasons: Counter[str] = Counter()
        for outcome, reason, count in result.all():
            outcomes[outcome] += count
            if outcome == RuleOutcome.SUPPRESSED.value and reason:
                reasons[reason] += count
        return RuleMetrics(
            rule_id=rule_id,
            rule_name=rule_name,
            evaluated_count=sum(outcomes.values()),
            applied_count=outcomes[RuleOutcome.APPLIED.value],
            suppressed_count=outcomes[RuleOutcome.SUPPRESSED.value],
            suppressed_by_reason=dict(reasons),
        )
