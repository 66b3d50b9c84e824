"""initial schema

Revision ID: 5b1e0c7d2a94
Revises:
Create Date: 2026-10-18 09:12:40.418203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e0c7d2a94'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("email", sa.Text, unique=True, index=True, nullable=False),
        sa.Column("name", sa.Text, server_default=""),
        sa.Column("is_admin", sa.Boolean, server_default="0"),
        sa.Column("registered_at", sa.DateTime, nullable=False),
    )

    op.create_table(
        "items",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("type", sa.Text, index=True, nullable=False),
        sa.Column("category", sa.Text, server_default=""),
        sa.Column("item_name", sa.Text, server_default=""),
        sa.Column("description", sa.Text, server_default=""),
        sa.Column("location", sa.Text, server_default="", index=True),
        sa.Column("date", sa.Date, nullable=True),
        sa.Column("contact_info", sa.Text, server_default=""),
        sa.Column("image", sa.LargeBinary, nullable=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), index=True, nullable=False),
        sa.Column("status", sa.Text, server_default="active", index=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), index=True, nullable=False),
        sa.Column("item_id", sa.Integer, sa.ForeignKey("items.id"), nullable=True),
        sa.Column("item_name", sa.Text, server_default=""),
        sa.Column("location", sa.Text, server_default=""),
        sa.Column("type", sa.Text, index=True, nullable=False),
        sa.Column("date", sa.Date, nullable=True),
        sa.Column("image", sa.LargeBinary, nullable=True),
        sa.Column("message", sa.Text, server_default=""),
        sa.Column("similarity_score", sa.Integer, nullable=True),
        sa.Column("action_required", sa.Boolean, server_default="0"),
        sa.Column("read_status", sa.Boolean, server_default="0"),
        sa.Column("is_viewed", sa.Boolean, server_default="0"),
        sa.Column("created_at", sa.DateTime, index=True, nullable=False),
        sa.UniqueConstraint("user_id", "item_id", name="uq_notification_user_item"),
    )

    op.create_table(
        "delivery_log",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("notification_id", sa.Integer, sa.ForeignKey("notifications.id"), nullable=False),
        sa.Column("channel", sa.Text, nullable=False),
        sa.Column("success", sa.Boolean, server_default="1"),
        sa.Column("message", sa.Text, server_default=""),
        sa.Column("sent_at", sa.DateTime, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("delivery_log")
    op.drop_table("notifications")
    op.drop_table("items")
    op.drop_table("users")
