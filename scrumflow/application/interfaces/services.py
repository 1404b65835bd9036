"""Service interfaces (ports) for the application layer.

Protocols define contracts for collaborators the engine consumes or exposes (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from scrumflow.application.dtos.rule_result import RuleResult
    from scrumflow.application.dtos.state_change import StateChangeEvent


class IDirectoryLookup(Protocol):
    """Protocol for project-name and user-email lookups ({{project}}, {{user}})."""

    async def get_project_name(self, project_id: str) -> str | None:
        """Return the project's display name, or None if unknown."""

    async def get_user_email(self, user_id: str) -> str | None:
        """Return the user's email address, or None if unknown."""


class IRuleEngine(Protocol):
    """Protocol for rule evaluation triggered by state changes."""

    async def evaluate(self, event: StateChangeEvent) -> list[RuleResult]:
        """Evaluate matching rules for a committed transition."""
