"""initial_schema

Create the change-management schema: projects, team members, milestones,
stakeholder directory and groups, per-project scores and history, coaching
tables and the AI usage log.

Revision ID: 5c1a9e0d2b47
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5c1a9e0d2b47"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated=True):
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=True)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True))
    return cols


def _adkar(default):
    return [
        sa.Column(name, sa.Integer(), nullable=True, server_default=str(default))
        for name in ("awareness", "desire", "knowledge", "ability", "reinforcement")
    ]


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    if "change_projects" not in existing_tables:
        op.create_table(
            "change_projects",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("status", sa.String(length=30), nullable=False, server_default="active"),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("logo_url", sa.String(length=500), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_change_projects_user_id", "change_projects", ["user_id"])

    if "change_project_members" not in existing_tables:
        op.create_table(
            "change_project_members",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=False),
            sa.Column("invited_email", sa.String(length=255), nullable=False),
            *_timestamps(updated=False),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("project_id", "invited_email", name="uq_project_member_email"),
        )
        op.create_index("ix_change_project_members_project_id", "change_project_members", ["project_id"])
        op.create_index("ix_change_project_members_invited_email", "change_project_members", ["invited_email"])

    if "milestones" not in existing_tables:
        op.create_table(
            "milestones",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("date", sa.Date(), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False, server_default="other"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="upcoming"),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("meeting_notes", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_milestones_project_id", "milestones", ["project_id"])

    if "stakeholder_groups" not in existing_tables:
        op.create_table(
            "stakeholder_groups",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("color", sa.String(length=20), nullable=True, server_default="#6b7280"),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_stakeholder_groups_user_id", "stakeholder_groups", ["user_id"])

    if "global_stakeholders" not in existing_tables:
        op.create_table(
            "global_stakeholders",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("phone", sa.String(length=50), nullable=True),
            sa.Column("role", sa.String(length=200), nullable=True),
            sa.Column("title", sa.String(length=200), nullable=True),
            sa.Column("department", sa.String(length=200), nullable=True),
            sa.Column("location", sa.String(length=200), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("avatar_url", sa.String(length=500), nullable=True),
            sa.Column("group_id", sa.Integer(), nullable=True),
            sa.Column("org_level", sa.String(length=50), nullable=True),
            sa.Column("reports_to_id", sa.Integer(), nullable=True),
            sa.Column("is_me", sa.Boolean(), nullable=False, server_default=sa.false()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["group_id"], ["stakeholder_groups.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["reports_to_id"], ["global_stakeholders.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_global_stakeholders_user_id", "global_stakeholders", ["user_id"])
        op.create_index("ix_global_stakeholders_group_id", "global_stakeholders", ["group_id"])

    if "project_stakeholders" not in existing_tables:
        op.create_table(
            "project_stakeholders",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=False),
            sa.Column("stakeholder_id", sa.Integer(), nullable=False),
            sa.Column("stakeholder_type", sa.String(length=20), nullable=True, server_default="neutral"),
            sa.Column("influence_level", sa.Integer(), nullable=True, server_default="5"),
            sa.Column("support_level", sa.Integer(), nullable=True, server_default="5"),
            *_adkar(50),
            sa.Column("engagement_score", sa.Integer(), nullable=True, server_default="0"),
            sa.Column("performance_score", sa.Integer(), nullable=True, server_default="0"),
            sa.Column("last_contact_date", sa.Date(), nullable=True),
            sa.Column("project_notes", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["stakeholder_id"], ["global_stakeholders.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("project_id", "stakeholder_id", name="uq_project_stakeholder"),
        )
        op.create_index("ix_project_stakeholders_project_id", "project_stakeholders", ["project_id"])
        op.create_index("ix_project_stakeholders_stakeholder_id", "project_stakeholders", ["stakeholder_id"])

    if "score_history" not in existing_tables:
        op.create_table(
            "score_history",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("project_stakeholder_id", sa.Integer(), nullable=False),
            sa.Column("engagement_score", sa.Integer(), nullable=True, server_default="0"),
            sa.Column("performance_score", sa.Integer(), nullable=True, server_default="0"),
            *_adkar(0),
            sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(
                ["project_stakeholder_id"], ["project_stakeholders.id"], ondelete="CASCADE",
            ),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_score_history_project_stakeholder_id", "score_history", ["project_stakeholder_id"])
        op.create_index("ix_score_history_recorded_at", "score_history", ["recorded_at"])

    if "project_groups" not in existing_tables:
        op.create_table(
            "project_groups",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=False),
            sa.Column("group_id", sa.Integer(), nullable=False),
            sa.Column("group_sentiment", sa.String(length=20), nullable=True, server_default="neutral"),
            sa.Column("influence_level", sa.Integer(), nullable=True, server_default="5"),
            *_adkar(50),
            sa.Column("project_notes", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["group_id"], ["stakeholder_groups.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("project_id", "group_id", name="uq_project_group"),
        )
        op.create_index("ix_project_groups_project_id", "project_groups", ["project_id"])
        op.create_index("ix_project_groups_group_id", "project_groups", ["group_id"])

    if "conversation_scripts" not in existing_tables:
        op.create_table(
            "conversation_scripts",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=True),
            sa.Column("title", sa.String(length=300), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("tags", sa.JSON(), nullable=True),
            sa.Column("stakeholder_type", sa.String(length=20), nullable=True),
            sa.Column("times_used", sa.Integer(), nullable=False, server_default="0"),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_conversation_scripts_user_id", "conversation_scripts", ["user_id"])
        op.create_index("ix_conversation_scripts_project_id", "conversation_scripts", ["project_id"])

    if "chat_messages" not in existing_tables:
        op.create_table(
            "chat_messages",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=True),
            sa.Column("role", sa.String(length=20), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            *_timestamps(updated=False),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_chat_messages_user_id", "chat_messages", ["user_id"])
        op.create_index("ix_chat_messages_project_id", "chat_messages", ["project_id"])
        op.create_index("ix_chat_messages_created_at", "chat_messages", ["created_at"])

    if "chat_insights" not in existing_tables:
        op.create_table(
            "chat_insights",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=True),
            sa.Column("stakeholder_id", sa.Integer(), nullable=True),
            sa.Column("insight", sa.Text(), nullable=False),
            sa.Column("insight_type", sa.String(length=50), nullable=False, server_default="general"),
            *_timestamps(updated=False),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["stakeholder_id"], ["global_stakeholders.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_chat_insights_user_id", "chat_insights", ["user_id"])
        op.create_index("ix_chat_insights_project_id", "chat_insights", ["project_id"])
        op.create_index("ix_chat_insights_stakeholder_id", "chat_insights", ["stakeholder_id"])
        op.create_index("ix_chat_insights_created_at", "chat_insights", ["created_at"])

    if "scheduled_followups" not in existing_tables:
        op.create_table(
            "scheduled_followups",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("project_id", sa.Integer(), nullable=False),
            sa.Column("stakeholder_id", sa.Integer(), nullable=True),
            sa.Column("scheduled_date", sa.Date(), nullable=False),
            sa.Column("title", sa.String(length=300), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
            *_timestamps(updated=False),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["stakeholder_id"], ["project_stakeholders.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_scheduled_followups_user_id", "scheduled_followups", ["user_id"])
        op.create_index("ix_scheduled_followups_project_id", "scheduled_followups", ["project_id"])
        op.create_index("ix_scheduled_followups_stakeholder_id", "scheduled_followups", ["stakeholder_id"])
        op.create_index("ix_scheduled_followups_scheduled_date", "scheduled_followups", ["scheduled_date"])

    if "ai_usage_logs" not in existing_tables:
        op.create_table(
            "ai_usage_logs",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("provider", sa.String(length=30), nullable=False),
            sa.Column("model", sa.String(length=80), nullable=False),
            sa.Column("prompt_tokens", sa.Integer(), nullable=True),
            sa.Column("completion_tokens", sa.Integer(), nullable=True),
            sa.Column("total_tokens", sa.Integer(), nullable=True),
            sa.Column("cost_usd", sa.Float(), nullable=True),
            sa.Column("latency_ms", sa.Integer(), nullable=True),
            sa.Column("user_id", sa.String(length=64), nullable=True),
            sa.Column("purpose", sa.String(length=100), nullable=True),
            sa.Column("project_id", sa.Integer(), nullable=True),
            sa.Column("success", sa.Boolean(), nullable=True),
            sa.Column("error_message", sa.Text(), nullable=True),
            *_timestamps(updated=False),
            sa.ForeignKeyConstraint(["project_id"], ["change_projects.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_ai_usage_logs_user_id", "ai_usage_logs", ["user_id"])


def downgrade():
    existing_tables = set(sa_inspect(op.get_bind()).get_table_names())
    for table in (
        "ai_usage_logs",
        "scheduled_followups",
        "chat_insights",
        "chat_messages",
        "conversation_scripts",
        "project_groups",
        "score_history",
        "project_stakeholders",
        "global_stakeholders",
        "stakeholder_groups",
        "milestones",
        "change_project_members",
        "change_projects",
    ):
        if table in existing_tables:
            op.drop_table(table)
