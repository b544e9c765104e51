"""create listing and moderation tables

Revision ID: 3b7e51c2a9d4
Revises:
Create Date: 2026-10-12 10:41:07.318220

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7e51c2a9d4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("password", sa.String(255), nullable=True),
        sa.Column("isActive", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("createdAt"),
        _timestamp("updatedAt"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("firstName", sa.String(100), nullable=False),
        sa.Column("lastName", sa.String(100), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("password", sa.String(255), nullable=True),
        _timestamp("createdAt"),
    )
    op.create_index("ix_admin_users_id", "admin_users", ["id"])
    op.create_index("ix_admin_users_email", "admin_users", ["email"], unique=True)

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("bedCount", sa.Integer(), nullable=True),
        sa.Column("bathCount", sa.Integer(), nullable=True),
        sa.Column("numberOfSpots", sa.Integer(), nullable=True),
        sa.Column("startDateRange", sa.DateTime(timezone=True), nullable=True),
        sa.Column("endDateRange", sa.DateTime(timezone=True), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("zip", sa.String(20), nullable=False),
        sa.Column("photos", sa.JSON(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "approvedBy", sa.Integer(), sa.ForeignKey("admin_users.id"), nullable=True
        ),
        sa.Column("approvedAt", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "cascadePending", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "cascadeHandledBy",
            sa.Integer(),
            sa.ForeignKey("admin_users.id"),
            nullable=True,
        ),
        sa.Column("cascadeHandledAt", sa.DateTime(timezone=True), nullable=True),
        _timestamp("createdAt"),
        _timestamp("updatedAt"),
    )
    op.create_index("ix_posts_id", "posts", ["id"])
    op.create_index("ix_posts_user", "posts", ["user"])
    op.create_index("ix_posts_city", "posts", ["city"])
    op.create_index("ix_posts_active", "posts", ["active"])
    op.create_index("ix_posts_approved", "posts", ["approved"])

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("post", sa.Integer(), sa.ForeignKey("posts.id"), nullable=False),
        sa.Column(
            "handledBy", sa.Integer(), sa.ForeignKey("admin_users.id"), nullable=True
        ),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _timestamp("createdAt"),
        sa.Column("handledAt", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user", "post", name="uq_reports_user_post"),
    )
    op.create_index("ix_reports_id", "reports", ["id"])
    op.create_index("ix_reports_user", "reports", ["user"])
    op.create_index("ix_reports_post", "reports", ["post"])
    op.create_index("ix_reports_status", "reports", ["status"])

    op.create_table(
        "payment_subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("endDate", sa.DateTime(timezone=True), nullable=True),
        _timestamp("createdAt"),
    )
    op.create_index("ix_payment_subscriptions_id", "payment_subscriptions", ["id"])
    op.create_index(
        "ix_payment_subscriptions_user", "payment_subscriptions", ["user"]
    )

    op.create_table(
        "outbound_notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("recipients", sa.JSON(), nullable=False),
        sa.Column("subject", sa.String(200), nullable=False),
        sa.Column("summary", sa.String(500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lastError", sa.Text(), nullable=True),
        _timestamp("createdAt"),
        sa.Column("sentAt", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_outbound_notifications_id", "outbound_notifications", ["id"])
    op.create_index(
        "ix_outbound_notifications_status", "outbound_notifications", ["status"]
    )


def downgrade() -> None:
    op.drop_table("outbound_notifications")
    op.drop_table("payment_subscriptions")
    op.drop_table("reports")
    op.drop_table("posts")
    op.drop_table("admin_users")
    op.drop_table("users")
