"""Persistence models: ORM entities and mixins."""

from scrumflow.infrastructure.persistence.models.directory import AppUser, Project
from scrumflow.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
    VersionedMixin,
)
from scrumflow.infrastructure.persistence.models.task import Task, TaskTemplate
from scrumflow.infrastructure.persistence.models.workflow import (
    Rule,
    RuleExecution,
    RuleTemplate,
    Workflow,
)

__all__ = [
    "AppUser",
    "CreatedAtMixin",
    "CuidMixin",
    "Project",
    "Rule",
    "RuleExecution",
    "RuleTemplate",
    "SoftDeleteMixin",
    "Task",
    "TaskTemplate",
    "TimestampMixin",
    "VersionedMixin",
    "Workflow",
]
