"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- config ---
    op.create_table(
        "config",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("metric_id", sa.String(64), nullable=False),
        sa.Column("metric_name", sa.String(128), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("required_since", sa.Date(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("default_value", sa.Float(), nullable=True),
        sa.Column("min_value", sa.Float(), nullable=True),
        sa.Column("max_value", sa.Float(), nullable=True),
        sa.Column("disallowed_values", sa.String(256), nullable=True),
        sa.Column("preset_values_csv", sa.String(256), nullable=True),
        sa.Column("show_ma", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ma_periods_csv", sa.String(64), nullable=True),
        sa.Column("group", sa.String(64), nullable=True),
        sa.Column("group_order", sa.Integer(), nullable=True),
        sa.Column("metric_order", sa.Integer(), nullable=True),
        sa.Column("is_calculated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("calc_expr", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "metric_id", name="uq_config_owner_metric"),
    )
    op.create_index("ix_config_id", "config", ["id"])
    op.create_index("ix_config_owner_id", "config", ["owner_id"])

    # --- log ---
    op.create_table(
        "log",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("metric_id", sa.String(64), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "date", "metric_id", name="uq_log_owner_date_metric"),
    )
    op.create_index("ix_log_id", "log", ["id"])
    op.create_index("ix_log_owner_id", "log", ["owner_id"])
    op.create_index("ix_log_date", "log", ["date"])
    op.create_index("ix_log_metric_id", "log", ["metric_id"])


def downgrade() -> None:
    op.drop_index("ix_log_metric_id", table_name="log")
    op.drop_index("ix_log_date", table_name="log")
    op.drop_index("ix_log_owner_id", table_name="log")
    op.drop_index("ix_log_id", table_name="log")
    op.drop_table("log")
    op.drop_index("ix_config_owner_id", table_name="config")
    op.drop_index("ix_config_id", table_name="config")
    op.drop_table("config")
