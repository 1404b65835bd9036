"""Shared enumerations for the rules engine.

Cross-cutting enums used by domain, application and infrastructure
(resource kinds, ledger outcomes, task lifecycle).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ResourceType(_ValuesMixin, str, Enum):
    """Kind of resource whose state transition can trigger rules."""

    TASK = "task"
    CARD = "card"


class RuleOutcome(_ValuesMixin, str, Enum):
    """Outcome stored on a rule execution ledger row."""

    APPLIED = "applied"
    SUPPRESSED = "suppressed"


class SuppressionReason(_ValuesMixin, str, Enum):
    """Why a matched rule produced no side effects."""

    IDEMPOTENT = "idempotent"
    NOT_USER_TRIGGERED = "not_user_triggered"
    NOT_MATCHING = "not_matching"
    INACTIVE = "inactive"


class TaskStatus(_ValuesMixin, str, Enum):
    """Task lifecycle status."""

    AVAILABLE = "available"
    CLAIMED = "claimed"
    COMPLETED = "completed"
