"""Infrastructure implementations of application service interfaces."""

from scrumflow.infrastructure.services.rule_engine import RuleEngine
from scrumflow.infrastructure.services.template_materializer import (
    TemplateMaterializer,
)

__all__ = [
    "RuleEngine",
    "TemplateMaterializer",
]
