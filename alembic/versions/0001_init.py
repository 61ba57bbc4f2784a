"""init schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

_ENUMS = {
    "role": ("owner", "admin", "member"),
    "global_role": ("admin", "owner", "member"),
    "invitation_status": ("pending", "accepted", "expired"),
    "task_status": ("To Do", "In Progress", "Done"),
    "task_priority": ("Low", "Medium", "High", "Urgent"),
    "task_type": ("Story", "Bug", "Task", "Epic"),
    "sprint_status": ("planning", "active", "completed"),
    "doc_type": ("note", "meeting", "decision", "retro", "spec", "research", "custom"),
}

def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*_ENUMS[name], name=name, create_type=False)

def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=True)

def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)

def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)

def upgrade() -> None:
    # enums
    for name, values in _ENUMS.items():
        postgresql.ENUM(*values, name=name).create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", _uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("role", _enum("global_role"), nullable=False, server_default="member"),
        _created_at(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "orgs",
        sa.Column("id", _uuid(), primary_key=True, nullable=False),
        _created_at(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", _uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("allow_member_invite", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("require_approval", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "memberships",
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("org_id", _uuid(), sa.ForeignKey("orgs.id"), primary_key=True),
        sa.Column("role", _enum("role"), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_memberships_org_id", "memberships", ["org_id"])

    op.create_table(
        "org_invitations",
        sa.Column("id", _uuid(), primary_key=True, nullable=False),
        sa.Column("org_id", _uuid(), sa.ForeignKey("orgs.id"), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", _enum("role"), nullable=False, server_default="member"),
        sa.Column("invited_by", _uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("status", _enum("invitation_status"), nullable=False, server_default="pending"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index("ix_org_invitations_org_id", "org_invitations", ["org_id"])
    op.create_index("ix_org_invitations_email", "org_invitations", ["email"])
    op.create_index("ix_org_invitations_token", "org_invitations", ["token"], unique=True)
    # at most one pending invitation per (org, email)
    op.create_index(
        "uq_org_invitations_pending_email",
        "org_invitations",
        ["org_id", "email"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "projects",
        sa.Column("id", _uuid(), primary_key=True, nullable=False),
        sa.Column("org_id", _uuid(), sa.ForeignKey("orgs.id"), nullable=True),
        sa.Column("owner_id", _uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("auto_delete_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_projects_org_id", "projects", ["org_id"])
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])
    op.create_index("ix_projects_deleted_at", "projects", ["deleted_at"])

    op.create_table(
        "project_members",
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "sprints",
        sa.Column("id", _uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("goal", sa.Text(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", _enum("sprint_status"), nullable=False, server_default="planning"),
        sa.Column("created_by", _uuid(), sa.ForeignKey("users.id"), nullable=False),
        _created_at(),
    )
    op.create_index("ix_sprints_project_id", "sprints", ["project_id"])

    op.create_table(
        "tasks",
        sa.Column("id", _uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", _enum("task_status"), nullable=False, server_default="To Do"),
        sa.Column("priority", _enum("task_priority"), nullable=False, server_default="Medium"),
        sa.Column("type", _enum("task_type"), nullable=False, server_default="Task"),
        sa.Column("assignee_id", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reporter_id", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("sprint_id", _uuid(), sa.ForeignKey("sprints.id"), nullable=True),
        sa.Column("epic_id", _uuid(), sa.ForeignKey("tasks.id"), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("story_points", sa.Integer(), nullable=True),
        sa.Column("estimated_hours", sa.Float(), nullable=True),
        sa.Column("actual_hours", sa.Float(), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_sprint_id", "tasks", ["sprint_id"])

    op.create_table(
        "comments",
        sa.Column("id", _uuid(), primary_key=True, nullable=False),
        sa.Column("task_id", _uuid(), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", _uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("parent_id", _uuid(), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_comments_task_id", "comments", ["task_id"])

    op.create_table(
        "documents",
        sa.Column("id", _uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("owner_id", _uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("summary", sa.Text(), nullable=False, server_default=""),
        sa.Column("tags", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("doc_type", _enum("doc_type"), nullable=False, server_default="note"),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_documents_project_id", "documents", ["project_id"])
    op.create_index("ix_documents_owner_id", "documents", ["owner_id"])

    op.create_table(
        "document_collaborators",
        sa.Column("document_id", _uuid(), sa.ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "auth_magic_links",
        sa.Column("token_hash", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_auth_magic_links_user_id", "auth_magic_links", ["user_id"])

def downgrade() -> None:
    op.drop_index("ix_auth_magic_links_user_id", table_name="auth_magic_links")
    op.drop_table("auth_magic_links")

    op.drop_table("document_collaborators")
    op.drop_index("ix_documents_owner_id", table_name="documents")
    op.drop_index("ix_documents_project_id", table_name="documents")
    op.drop_table("documents")

    op.drop_index("ix_comments_task_id", table_name="comments")
    op.drop_table("comments")

    op.drop_index("ix_tasks_sprint_id", table_name="tasks")
    op.drop_index("ix_tasks_project_id", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_sprints_project_id", table_name="sprints")
    op.drop_table("sprints")

    op.drop_table("project_members")
    op.drop_index("ix_projects_deleted_at", table_name="projects")
    op.drop_index("ix_projects_owner_id", table_name="projects")
    op.drop_index("ix_projects_org_id", table_name="projects")
    op.drop_table("projects")

    op.drop_index("uq_org_invitations_pending_email", table_name="org_invitations")
    op.drop_index("ix_org_invitations_token", table_name="org_invitations")
    op.drop_index("ix_org_invitations_email", table_name="org_invitations")
    op.drop_index("ix_org_invitations_org_id", table_name="org_invitations")
    op.drop_table("org_invitations")

    op.drop_index("ix_memberships_org_id", table_name="memberships")
    op.drop_table("memberships")

    op.drop_table("orgs")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    for name in reversed(list(_ENUMS)):
        postgresql.ENUM(name=name).drop(op.get_bind(), checkfirst=True)
