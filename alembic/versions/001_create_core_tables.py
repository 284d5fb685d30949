"""Create users, tasks, notes and learning_guides tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

Every owned table references users.id with ON DELETE CASCADE and carries a
(user_id, created_at) index for the owner's newest-first listing.

Rollback: downgrade() drops all four tables (all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _owner_column() -> sa.Column:
    return sa.Column(
        "user_id",
        sa.Uuid(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("auth_provider", sa.String(20), nullable=False, server_default="local"),
        *_timestamps(),
        sa.CheckConstraint(
            "auth_provider IN ('local', 'google')", name="ck_users_auth_provider"
        ),
        sa.CheckConstraint(
            "auth_provider <> 'local' OR password_hash IS NOT NULL",
            name="ck_users_local_password",
        ),
    )
    op.create_index("idx_users_name", "users", ["name"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _owner_column(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("idx_tasks_user_created", "tasks", ["user_id", "created_at"])

    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _owner_column(),
        sa.Column("title", sa.String(20), nullable=False),
        sa.Column("text", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("original_note", sa.String(1024), nullable=False, server_default=sa.text("''")),
        sa.Column("summarized_note", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("downloaded_pdf", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("idx_notes_user_created", "notes", ["user_id", "created_at"])

    op.create_table(
        "learning_guides",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _owner_column(),
        sa.Column("topic", sa.String(150), nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("daily_plan", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "idx_learning_guides_user_created", "learning_guides", ["user_id", "created_at"]
    )
    op.create_index("idx_learning_guides_topic", "learning_guides", ["topic"])


def downgrade() -> None:
    op.drop_index("idx_learning_guides_topic", table_name="learning_guides")
    op.drop_index("idx_learning_guides_user_created", table_name="learning_guides")
    op.drop_table("learning_guides")
    op.drop_index("idx_notes_user_created", table_name="notes")
    op.drop_table("notes")
    op.drop_index("idx_tasks_user_created", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("idx_users_name", table_name="users")
    op.drop_table("users")
