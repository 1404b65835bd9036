"""TaskTemplate and Task ORM models."""

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scrumflow.infrastructure.persistence.database import Base
from scrumflow.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
    VersionedMixin,
)
from scrumflow.shared.enums import TaskStatus

TASK_TITLE_MAX_LENGTH = 56


class TaskTemplate(CuidMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Parameterized task pattern materialized by rules. Table: task_template.

    name is the title pattern and description the body pattern; both may
    contain {{tokens}}.
    """

    __tablename__ = "task_template"

    org_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type_id: Mapped[str] = mapped_column(String, nullable=False)
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=3, server_default=sa.text("3")
    )
    created_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        CheckConstraint("priority BETWEEN 1 AND 5", name="task_template_priority_check"),
    )


class Task(CuidMixin, TimestampMixin, VersionedMixin, Base):
    """Task in a project's pool. Table: task."""

    __tablename__ = "task"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type_id: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String(TASK_TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=3, server_default=sa.text("3")
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TaskStatus.AVAILABLE.value,
        server_default=TaskStatus.AVAILABLE.value,
    )
    created_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    card_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    __table_args__ = (
        Index("ix_task_project_status", "project_id", "status"),
        CheckConstraint("priority BETWEEN 1 AND 5", name="task_priority_check"),
        CheckConstraint(
            "status IN ({})".format(
                ", ".join("'{}'".format(v) for v in TaskStatus.values())
            ),
            name="task_status_check",
        ),
        CheckConstraint(
            f"length(title) <= {TASK_TITLE_MAX_LENGTH}",
            name="task_title_max_length_check",
        ),
    )
