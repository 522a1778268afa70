"""Initial schema — ai_usage_logs, curriculum.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "ai_usage_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("call_type", sa.String(40), nullable=False),
        sa.Column("request_timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_ai_usage_logs_user_call_ts", "ai_usage_logs",
        ["user_id", "call_type", "request_timestamp"],
    )

    op.create_table(
        "curriculum",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("data", sa.JSON, nullable=True),
    )


def downgrade() -> None:
    op.drop_table("curriculum")
    op.drop_index("ix_ai_usage_logs_user_call_ts", table_name="ai_usage_logs")
    op.drop_table("ai_usage_logs")
