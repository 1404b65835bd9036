"""Rule evaluation results returned to the caller.

Each candidate rule yields exactly one RuleResult whose outcome is one of
Applied, Suppressed or Failed.
"""

from __future__ import annotations

from dataclasses import dataclass

from scrumflow.shared.enums import RuleOutcome, SuppressionReason


@dataclass(frozen=True)
class Applied:
    """The rule fired: its ledger row was written and count tasks were created."""

    count: int

    @property
    def outcome(self) -> RuleOutcome:
        return RuleOutcome.APPLIED


@dataclass(frozen=True)
class Suppressed:
    """The rule matched but produced no side effects."""

    reason: SuppressionReason

    @property
    def outcome(self) -> RuleOutcome:
        return RuleOutcome.SUPPRESSED


@dataclass(frozen=True)
class Failed:
    """The rule's transaction was rolled back; nothing was recorded for it."""

    error_code: str
    message: str


RuleOutcomeVariant = Applied | Suppressed | Failed


@dataclass(frozen=True)
class RuleResult:
    """Outcome of one candidate rule for one evaluation call."""

    rule_id: str
    outcome: RuleOutcomeVariant
    task_ids: tuple[str, ...] = ()

    @property
    def applied(self) -> bool:
        return isinstance(self.outcome, Applied)

    @property
    def suppressed(self) -> bool:
        return isinstance(self.outcome, Suppressed)

    @property
    def failed(self) -> bool:
        return isinstance(self.outcome, Failed)
