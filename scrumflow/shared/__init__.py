"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from scrumflow.shared.enums import (
    ResourceType,
    RuleOutcome,
    SuppressionReason,
    TaskStatus,
)
from scrumflow.shared.utils import ensure_utc, generate_cuid, utc_now

__all__ = [
    "ResourceType",
    "RuleOutcome",
    "SuppressionReason",
    "TaskStatus",
    "ensure_utc",
    "generate_cuid",
    "utc_now",
]
