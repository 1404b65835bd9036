"""Domain entities.

Pure domain models; no ORM or persistence concerns.
"""

from scrumflow.domain.entities.workflow import RuleEntity, WorkflowEntity

__all__ = [
    "RuleEntity",
    "WorkflowEntity",
]
