"""Template variable resolution for materialized task titles and descriptions.

The token set is closed and replacement is literal: `{{name}}` is swapped
for its value, case-sensitive, with no expressions or filters. Tokens
outside the set are left in the text unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from scrumflow.shared.enums import ResourceType

if TYPE_CHECKING:
    from scrumflow.application.dtos.state_change import StateChangeEvent

CREATED_STATE_LABEL = "(created)"

TOKENS: tuple[str, ...] = ("father", "from_state", "to_state", "project", "user")

_TOKEN_RE = re.compile(r"\{\{([a-z_]+)\}\}")

_ORIGIN_LINKS: dict[ResourceType, tuple[str, str]] = {
    ResourceType.TASK: ("Task", "/tasks"),
    ResourceType.CARD: ("Card", "/cards"),
}


def father_link(resource_type: ResourceType, resource_id: str) -> str:
    """Return the markdown link to the origin, e.g. `[Task #42](/tasks/42)`."""
    label, path = _ORIGIN_LINKS[ResourceType(resource_type)]
    return f"[{label} #{resource_id}]({path}/{resource_id})"


@dataclass(frozen=True)
class VariableContext:
    """Resolved value for every token, computed once per evaluation call."""

    father: str
    from_state: str
    to_state: str
    project: str
    user: str

    @classmethod
    def from_event(
        cls,
        event: StateChangeEvent,
        *,
        project_name: str | None,
        user_email: str | None,
    ) -> VariableContext:
        """Build the context from an event and the externally looked-up names."""
        return cls(
            father=father_link(event.resource_type, event.resource_id),
            from_state=(
                event.from_state if event.from_state is not None else CREATED_STATE_LABEL
            ),
            to_state=event.to_state,
            project=project_name or "",
            user=user_email or "",
        )

    def as_mapping(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in TOKENS}


def resolve(text: str | None, context: VariableContext) -> str:
    """Replace each known `{{token}}` in text with its value from context."""
    if not text:
        return ""
    values = context.as_mapping()
    # Single pass: substituted values are never re-scanned for tokens.
    return _TOKEN_RE.sub(lambda m: values.get(m.group(1), m.group(0)), text)
