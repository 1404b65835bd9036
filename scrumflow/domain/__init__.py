"""Domain layer: entities and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from scrumflow.domain.entities import RuleEntity, WorkflowEntity
from scrumflow.domain.exceptions import (
    AutomationException,
    ResourceNotFoundException,
    RuleConfigurationException,
    ScrumflowException,
    SqlNotConfiguredException,
    ValidationException,
)

__all__ = [
    # Entities
    "RuleEntity",
    "WorkflowEntity",
    # Exceptions
    "AutomationException",
    "ResourceNotFoundException",
    "RuleConfigurationException",
    "ScrumflowException",
    "SqlNotConfiguredException",
    "ValidationException",
]
