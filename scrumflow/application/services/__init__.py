"""Application services: rule matching and template variable resolution."""

from scrumflow.application.services.rule_matcher import RuleMatcher
from scrumflow.application.services.variable_resolver import (
    CREATED_STATE_LABEL,
    TOKENS,
    VariableContext,
    father_link,
    resolve,
)

__all__ = [
    "CREATED_STATE_LABEL",
    "RuleMatcher",
    "TOKENS",
    "VariableContext",
    "father_link",
    "resolve",
]
