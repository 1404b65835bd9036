"""Workflow, Rule, RuleTemplate and RuleExecution ORM models. Transition automation."""

import sqlalchemy as sa
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scrumflow.infrastructure.persistence.database import Base
from scrumflow.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from scrumflow.shared.enums import ResourceType, RuleOutcome


def _in_values(column: str, values: list[str]) -> str:
    """SQL `column IN ('a', 'b')` for a CHECK constraint."""
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class Workflow(CuidMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Project-scoped container of rules. Table: workflow."""

    __tablename__ = "workflow"

    org_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.false()
    )
    created_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    rules: Mapped[list["Rule"]] = relationship(
        back_populates="workflow",
        cascade="all, delete-orphan",
        order_by="Rule.id",
    )

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_workflow_project_name"),
    )


class Rule(CuidMixin, TimestampMixin, Base):
    """Trigger condition bound to task templates. Table: rule."""

    __tablename__ = "rule"

    workflow_id: Mapped[str] = mapped_column(
        String, ForeignKey("workflow.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    goal: Mapped[str | None] = mapped_column(Text, nullable=True)
    resource_type: Mapped[str] = mapped_column(String(16), nullable=False)
    task_type_id: Mapped[str | None] = mapped_column(String, nullable=True)
    to_state: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.true()
    )

    workflow: Mapped[Workflow] = relationship(back_populates="rules")

    __table_args__ = (
        CheckConstraint(
            _in_values("resource_type", ResourceType.values()),
            name="rule_resource_type_check",
        ),
        CheckConstraint(
            "resource_type = 'task' OR task_type_id IS NULL",
            name="rule_task_type_scope_check",
        ),
        Index("ix_rule_match", "resource_type", "to_state"),
    )


class RuleTemplate(Base):
    """Ordered link between a rule and a task template. Table: rule_template."""

    __tablename__ = "rule_template"

    rule_id: Mapped[str] = mapped_column(
        String, ForeignKey("rule.id", ondelete="CASCADE"), primary_key=True
    )
    template_id: Mapped[str] = mapped_column(
        String, ForeignKey("task_template.id", ondelete="CASCADE"), primary_key=True
    )
    execution_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )


class RuleExecution(CuidMixin, CreatedAtMixin, Base):
    """Append-only idempotency ledger. Table: rule_execution.

    At most one row per (rule_id, origin_type, origin_id). Rows are never
    updated; metrics read from this table.
    """

    __tablename__ = "rule_execution"

    rule_id: Mapped[str] = mapped_column(
        String, ForeignKey("rule.id", ondelete="CASCADE"), nullable=False, index=True
    )
    origin_type: Mapped[str] = mapped_column(String(16), nullable=False)
    origin_id: Mapped[str] = mapped_column(String, nullable=False)
    outcome: Mapped[str] = mapped_column(String(16), nullable=False)
    suppression_reason: Mapped[str | None] = mapped_column(String(32), nullable=True)
    user_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "rule_id", "origin_type", "origin_id", name="uq_rule_execution_origin"
        ),
        Index("ix_rule_execution_origin", "origin_type", "origin_id"),
        CheckConstraint(
            _in_values("origin_type", ResourceType.values()),
            name="rule_execution_origin_type_check",
        ),
        CheckConstraint(
            _in_values("outcome", RuleOutcome.values()),
            name="rule_execution_outcome_check",
        ),
    )
