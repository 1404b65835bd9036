"""DTOs for tasks and task templates (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskResult:
    """Task row as seen by the engine after creation."""

    id: str
    project_id: str
    type_id: str
    title: str
    description: str | None
    priority: int
    status: str
    created_by: str | None
    card_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class TaskTemplateResult:
    """Task template attached to a rule, in execution order."""

    id: str
    org_id: str
    project_id: str
    name: str
    description: str | None
    type_id: str
    priority: int
    execution_order: int
    is_deleted: bool = False
