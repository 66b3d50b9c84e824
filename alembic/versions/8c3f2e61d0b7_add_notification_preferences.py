"""add notification preferences to users

Revision ID: 8c3f2e61d0b7
Revises: 5b1e0c7d2a94
Create Date: 2026-10-19 10:41:07.552913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8c3f2e61d0b7'
down_revision: Union[str, Sequence[str], None] = '5b1e0c7d2a94'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table("users") as batch_op:
        batch_op.add_column(sa.Column("notify_min_similarity", sa.Integer(), server_default="60", nullable=False))
        batch_op.add_column(sa.Column("notify_location_alerts", sa.Boolean(), server_default="1", nullable=False))
        batch_op.add_column(sa.Column("notify_new_items", sa.Boolean(), server_default="1", nullable=False))
        batch_op.add_column(sa.Column("notify_max_daily", sa.Integer(), server_default="10", nullable=False))


def downgrade() -> None:
    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_column("notify_max_daily")
        batch_op.drop_column("notify_new_items")
        batch_op.drop_column("notify_location_alerts")
        batch_op.drop_column("notify_min_similarity")
