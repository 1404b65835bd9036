"""Pytest configuration and fixtures for scrumflow.

Most persistence tests run against a throwaway SQLite file (aiosqlite) built
from the ORM metadata. Tests marked requires_db use the Postgres database
from DATABASE_URL instead (schema from: alembic upgrade head) and are
skipped when it is not configured. Postgres data persists after the test,
so those tests use unique names and ids.
"""

import uuid
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scrumflow.application.dtos.state_change import StateChangeEvent
from scrumflow.application.dtos.task import TaskResult, TaskTemplateResult
from scrumflow.core.config import get_settings
from scrumflow.domain.entities.workflow import RuleEntity, WorkflowEntity
from scrumflow.infrastructure.persistence import models  # noqa: F401  (registers tables)
from scrumflow.infrastructure.persistence.database import Base
from scrumflow.infrastructure.persistence.models.directory import AppUser, Project
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
from scrumflow.shared.enums import ResourceType


class RulesStore:
    """Seeds and inspects rules-engine tables; each call commits its own transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def project(self, name: str = "Apollo", org_id: str = "org-1") -> Project:
        async with self.session_factory() as session, session.begin():
            project = Project(org_id=org_id, name=name)
            session.add(project)
        return project

    async def user(self, email: str | None = None, org_id: str = "org-1") -> AppUser:
        async with self.session_factory() as session, session.begin():
            user = AppUser(
                org_id=org_id, email=email or f"dev-{uuid.uuid4().hex[:8]}@example.com"
            )
            session.add(user)
        return user

    async def workflow(
        self, project: Project, *, name: str | None = None, is_active: bool = True
    ) -> WorkflowEntity:
        async with self.session_factory() as session, session.begin():
            return await WorkflowRepository(session).create_workflow(
                project.org_id,
                project.id,
                name or f"Workflow {uuid.uuid4().hex[:8]}",
                is_active=is_active,
            )

    async def rule(
        self,
        workflow: WorkflowEntity,
        *,
        to_state: str = "completed",
        resource_type: ResourceType = ResourceType.TASK,
        task_type_id: str | None = None,
        is_active: bool = True,
        name: str = "Follow-up",
    ) -> RuleEntity:
        async with self.session_factory() as session, session.begin():
            return await WorkflowRepository(session).create_rule(
                workflow.id,
                name,
                resource_type,
                to_state,
                task_type_id=task_type_id,
                is_active=is_active,
            )

    async def template(
        self,
        project: Project,
        rule: RuleEntity | None = None,
        *,
        name: str = "Review {{father}}",
        description: str | None = None,
        type_id: str = "type-review",
        priority: int = 3,
        execution_order: int = 0,
    ) -> TaskTemplateResult:
        """Create a template and, when rule is given, attach it to the rule."""
        async with self.session_factory() as session, session.begin():
            template = await TaskTemplateRepository(session).create_template(
                project.org_id,
                project.id,
                name,
                type_id,
                description=description,
                priority=priority,
            )
            if rule is not None:
                await WorkflowRepository(session).attach_template(
                    rule.id, template.id, execution_order
                )
        return template

    async def delete_template(self, template_id: str) -> None:
        async with self.session_factory() as session, session.begin():
            await TaskTemplateRepository(session).soft_delete(template_id)

    async def tasks(self, project_id: str) -> list[TaskResult]:
        async with self.session_factory() as session:
            return await TaskRepository(session).list_for_project(project_id)

    async def ledger(self, rule_id: str, origin_type: str, origin_id: str):
        async with self.session_factory() as session:
            return await RuleExecutionRepository(session).get(
                rule_id, origin_type, origin_id
            )


def _make_event(
    project: Project,
    user: AppUser,
    *,
    resource_type: ResourceType = ResourceType.TASK,
    resource_id: str = "42",
    from_state: str | None = "claimed",
    to_state: str = "completed",
    user_triggered: bool = True,
    task_type_id: str | None = None,
) -> StateChangeEvent:
    return StateChangeEvent(
        resource_type=resource_type,
        resource_id=resource_id,
        to_state=to_state,
        project_id=project.id,
        org_id=project.org_id,
        user_id=user.id,
        user_triggered=user_triggered,
        from_state=from_state,
        task_type_id=task_type_id,
    )


@pytest.fixture
async def session_factory(tmp_path: Path) -> async_sessionmaker[AsyncSession]:
    """Session factory over a fresh SQLite file with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rules.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def make_event():
    """Factory for user-triggered StateChangeEvents (task 42, claimed -> completed)."""
    return _make_event


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> RulesStore:
    return RulesStore(session_factory)


@pytest.fixture
async def pg_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for the configured Postgres database.

    Skips (pytest.skip) when DATABASE_URL is not a Postgres URL. Use
    @pytest.mark.requires_db on tests that need this fixture; run without
    DB via: pytest -m 'not requires_db'.
    """
    get_settings.cache_clear()
    settings = get_settings()
    if not settings.is_postgres:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL=postgresql+asyncpg://..., "
            "then run: alembic upgrade head"
        )
    engine = create_async_engine(settings.database_url, pool_size=5)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def pg_store(pg_session_factory: async_sessionmaker[AsyncSession]) -> RulesStore:
    return RulesStore(pg_session_factory)
