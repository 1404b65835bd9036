"""Application interfaces (ports): repository and service protocols."""

from scrumflow.application.interfaces.repositories import (
    IRuleExecutionRepository,
    ITaskRepository,
    ITaskTemplateRepository,
    IWorkflowRepository,
)
from scrumflow.application.interfaces.services import IDirectoryLookup, IRuleEngine

__all__ = [
    "IDirectoryLookup",
    "IRuleEngine",
    "IRuleExecutionRepository",
    "ITaskRepository",
    "ITaskTemplateRepository",
    "IWorkflowRepository",
]
