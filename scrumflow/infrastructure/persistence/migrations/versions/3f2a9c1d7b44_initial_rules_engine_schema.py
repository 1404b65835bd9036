"""initial_rules_engine_schema

Revision ID: 3f2a9c1d7b44
Revises:
Create Date: 2026-10-19 09:12:41.207315

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b44"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "project",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("org_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_project_org_id", "project", ["org_id"])

    op.create_table(
        "app_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("org_id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_app_user_org_id", "app_user", ["org_id"])

    op.create_table(
        "workflow",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("org_id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("created_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["app_user.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "name", name="uq_workflow_project_name"),
    )
    op.create_index("ix_workflow_org_id", "workflow", ["org_id"])
    op.create_index("ix_workflow_project_id", "workflow", ["project_id"])
    op.create_index("ix_workflow_deleted_at", "workflow", ["deleted_at"])

    op.create_table(
        "rule",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("goal", sa.Text(), nullable=True),
        sa.Column("resource_type", sa.String(length=16), nullable=False),
        sa.Column("task_type_id", sa.String(), nullable=True),
        sa.Column("to_state", sa.String(), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["workflow_id"], ["workflow.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "resource_type IN ('task', 'card')", name="rule_resource_type_check"
        ),
        sa.CheckConstraint(
            "resource_type = 'task' OR task_type_id IS NULL",
            name="rule_task_type_scope_check",
        ),
    )
    op.create_index("ix_rule_workflow_id", "rule", ["workflow_id"])
    op.create_index("ix_rule_match", "rule", ["resource_type", "to_state"])

    op.create_table(
        "task_template",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("org_id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type_id", sa.String(), nullable=False),
        sa.Column("priority", sa.Integer(), server_default=sa.text("3"), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["app_user.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "priority BETWEEN 1 AND 5", name="task_template_priority_check"
        ),
    )
    op.create_index("ix_task_template_org_id", "task_template", ["org_id"])
    op.create_index("ix_task_template_project_id", "task_template", ["project_id"])
    op.create_index("ix_task_template_deleted_at", "task_template", ["deleted_at"])

    op.create_table(
        "rule_template",
        sa.Column("rule_id", sa.String(), nullable=False),
        sa.Column("template_id", sa.String(), nullable=False),
        sa.Column(
            "execution_order", sa.Integer(), server_default=sa.text("0"), nullable=False
        ),
        sa.ForeignKeyConstraint(["rule_id"], ["rule.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["template_id"], ["task_template.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("rule_id", "template_id"),
    )

    op.create_table(
        "rule_execution",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("rule_id", sa.String(), nullable=False),
        sa.Column("origin_type", sa.String(length=16), nullable=False),
        sa.Column("origin_id", sa.String(), nullable=False),
        sa.Column("outcome", sa.String(length=16), nullable=False),
        sa.Column("suppression_reason", sa.String(length=32), nullable=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["rule_id"], ["rule.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "rule_id", "origin_type", "origin_id", name="uq_rule_execution_origin"
        ),
        sa.CheckConstraint(
            "origin_type IN ('task', 'card')", name="rule_execution_origin_type_check"
        ),
        sa.CheckConstraint(
            "outcome IN ('applied', 'suppressed')", name="rule_execution_outcome_check"
        ),
    )
    op.create_index("ix_rule_execution_rule_id", "rule_execution", ["rule_id"])
    op.create_index(
        "ix_rule_execution_origin", "rule_execution", ["origin_type", "origin_id"]
    )

    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("type_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=56), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.Integer(), server_default=sa.text("3"), nullable=False),
        sa.Column(
            "status", sa.String(length=32), server_default="available", nullable=False
        ),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("card_id", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["app_user.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("priority BETWEEN 1 AND 5", name="task_priority_check"),
        sa.CheckConstraint(
            "status IN ('available', 'claimed', 'completed')", name="task_status_check"
        ),
        sa.CheckConstraint("length(title) <= 56", name="task_title_max_length_check"),
    )
    op.create_index("ix_task_project_id", "task", ["project_id"])
    op.create_index("ix_task_card_id", "task", ["card_id"])
    op.create_index("ix_task_project_status", "task", ["project_id", "status"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_task_project_status", table_name="task")
    op.drop_index("ix_task_card_id", table_name="task")
    op.drop_index("ix_task_project_id", table_name="task")
    op.drop_table("task")
    op.drop_index("ix_rule_execution_origin", table_name="rule_execution")
    op.drop_index("ix_rule_execution_rule_id", table_name="rule_execution")
    op.drop_table("rule_execution")
    op.drop_table("rule_template")
    op.drop_index("ix_task_template_deleted_at", table_name="task_template")
    op.drop_index("ix_task_template_project_id", table_name="task_template")
    op.drop_index("ix_task_template_org_id", table_name="task_template")
    op.drop_table("task_template")
    op.drop_index("ix_rule_match", table_name="rule")
    op.drop_index("ix_rule_workflow_id", table_name="rule")
    op.drop_table("rule")
    op.drop_index("ix_workflow_deleted_at", table_name="workflow")
    op.drop_index("ix_workflow_project_id", table_name="workflow")
    op.drop_index("ix_workflow_org_id", table_name="workflow")
    op.drop_table("workflow")
    op.drop_index("ix_app_user_org_id", table_name="app_user")
    op.drop_table("app_user")
    op.drop_index("ix_project_org_id", table_name="project")
    op.drop_table("project")
