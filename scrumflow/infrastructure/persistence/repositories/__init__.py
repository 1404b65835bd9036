"""Persistence repositories. Re-exports for dependency injection."""

from scrumflow.infrastructure.persistence.repositories.base import BaseRepository
from scrumflow.infrastructure.persistence.repositories.directory_repo import (
    DirectoryRepository,
)
from scrumflow.infrastructure.persistence.repositories.rule_execution_repo import (
    RuleExecutionRepository,
)
from scrumflow.infrastructure.persistence.repositories.task_repo import TaskRepository
from scrumflow.infrastructure.persistence.repositories.task_template_repo import (
    TaskTemplateRepository,
)
from scrumflow.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowRepository,
)

__all__ = [
    "BaseRepository",
    "DirectoryRepository",
    "RuleExecutionRepository",
    "TaskRepository",
    "TaskTemplateRepository",
    "WorkflowRepository",
]
