"""State change event DTO: the single input of rule evaluation."""

from __future__ import annotations

from dataclasses import dataclass

from scrumflow.domain.exceptions import ValidationException
from scrumflow.shared.enums import ResourceType


@dataclass(frozen=True)
class StateChangeEvent:
    """A committed task or card transition, built by the lifecycle handler.

    from_state is None when the resource was just created. task_type_id is
    only meaningful for task events. Construction raises ValidationException
    for malformed events so callers can map it to a client error before any
    rule is evaluated.
    """

    resource_type: ResourceType
    resource_id: str
    to_state: str
    project_id: str
    org_id: str
    user_id: str
    user_triggered: bool
    from_state: str | None = None
    task_type_id: str | None = None

    def __post_init__(self) -> None:
        try:
            resource_type = ResourceType(self.resource_type)
        except ValueError:
            raise ValidationException(
                f"resource_type must be one of {ResourceType.values()}, "
                f"got {self.resource_type!r}",
                field="resource_type",
            ) from None
        object.__setattr__(self, "resource_type", resource_type)
        for name in ("resource_id", "to_state", "project_id", "org_id", "user_id"):
            if not getattr(self, name):
                raise ValidationException(f"{name} is required", field=name)
        if resource_type == ResourceType.CARD and self.task_type_id is not None:
            raise ValidationException(
                "task_type_id only applies to task events", field="task_type_id"
            )

    @property
    def origin_type(self) -> str:
        """Ledger origin_type for this event (the resource type value)."""
        return self.resource_type.value
