"""DTOs for rule execution ledger rows and their read-side aggregates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class RuleExecutionResult:
    """One immutable ledger row keyed by (rule_id, origin_type, origin_id)."""

    id: str
    rule_id: str
    origin_type: str
    origin_id: str
    outcome: str
    suppression_reason: str | None
    user_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class RuleExecutionListItem:
    """Ledger row for drill-down listings, with the triggering user's email."""

    id: str
    origin_type: str
    origin_id: str
    outcome: str
    suppression_reason: str | None
    user_id: str | None
    user_email: str | None
    created_at: datetime


@dataclass(frozen=True)
class RuleMetrics:
    """Evaluated/applied/suppressed counts for one rule in a time window."""

    rule_id: str
    rule_name: str
    evaluated_count: int
    applied_count: int
    suppressed_count: int
    suppressed_by_reason: dict[str, int] = field(default_factory=dict)
