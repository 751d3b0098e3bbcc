"""Initial schema — users, assignment rules, notifications.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users (directory view: role + active flag)
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index("idx_users_role_active", "users", ["role", "is_active"])

    # Assignment rules
    op.create_table(
        "assignment_rules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("priority", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("asset_types", ARRAY(sa.String(100)), nullable=False, server_default="{}"),
        sa.Column("categories", ARRAY(sa.String(100)), nullable=False, server_default="{}"),
        sa.Column("locations", ARRAY(sa.String(200)), nullable=False, server_default="{}"),
        sa.Column("priorities", ARRAY(sa.String(20)), nullable=False, server_default="{}"),
        sa.Column(
            "assign_to_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index(
        "idx_rules_active_priority", "assignment_rules", ["is_active", "priority", "created_at"]
    )
    op.create_index("idx_rules_assign_to", "assignment_rules", ["assign_to_id"])

    # Notifications
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.String(64),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("work_order_id", sa.String(64), nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("idx_notifications_user_read", "notifications", ["user_id", "is_read"])
    op.create_index("idx_notifications_read_created", "notifications", ["is_read", "created_at"])
    op.create_index(
        "uq_notifications_assigned_once",
        "notifications",
        ["user_id", "work_order_id"],
        unique=True,
        postgresql_where=sa.text("type = 'WORK_ORDER_ASSIGNED'"),
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("assignment_rules")
    op.drop_table("users")
