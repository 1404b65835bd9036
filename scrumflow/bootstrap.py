"""Composition root: builds a RuleEngine wired to the configured database."""

from __future__ import annotations

from typing import TYPE_CHECKING

from scrumflow.core.config import get_settings
from scrumflow.infrastructure.persistence.database import get_session_factory
from scrumflow.infrastructure.services.rule_engine import RuleEngine
from scrumflow.infrastructure.services.template_materializer import (
    TemplateMaterializer,
)
from scrumflow.shared.telemetry.logging import get_logger, setup_logging

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)


def init_runtime() -> None:
    """Process-level setup for a host embedding the engine (logging from settings)."""
    settings = get_settings()
    setup_logging()
    logger.info(
        "%s %s starting (debug=%s)",
        settings.app_name,
        settings.app_version,
        settings.debug,
    )


def build_rule_engine(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> RuleEngine:
    """Return a RuleEngine using settings for materialization limits.

    Raises SqlNotConfiguredException when no session_factory is given and
    DATABASE_URL is not set.
    """
    settings = get_settings()
    return RuleEngine(
        session_factory or get_session_factory(),
        materializer=TemplateMaterializer.from_settings(settings),
    )
