"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "targets",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("check_interval_sec", sa.Integer(), nullable=False),
        sa.Column("is_running", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expected_status_code", sa.Integer(), nullable=True),
        sa.Column("consecutive_failures", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active_alert", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_targets_is_running", "targets", ["is_running"], unique=False)
    op.create_index("ix_targets_updated_at", "targets", ["updated_at"], unique=False)

    op.create_table(
        "check_results",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "target_id",
            sa.Uuid(),
            sa.ForeignKey("targets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "checked_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("http_status", sa.Integer(), nullable=True),
        sa.Column("latency_ms", sa.Integer(), nullable=True),
        sa.Column("is_up", sa.Boolean(), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
    )
    op.create_index(
        "ix_check_results_target_time",
        "check_results",
        ["target_id", "checked_at"],
        unique=False,
    )
    op.create_index(
        "ix_check_results_checked_at",
        "check_results",
        ["checked_at"],
        unique=False,
    )

    op.create_table(
        "schedule_entities",
        sa.Column("target_id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("check_interval_sec", sa.Integer(), nullable=False),
        sa.Column("next_run_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("wake_token", sa.String(length=64), nullable=True),
        sa.Column("last_handled_token", sa.String(length=64), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_schedule_entities_next_run_at",
        "schedule_entities",
        ["next_run_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_schedule_entities_next_run_at", table_name="schedule_entities")
    op.drop_table("schedule_entities")

    op.drop_index("ix_check_results_checked_at", table_name="check_results")
    op.drop_index("ix_check_results_target_time", table_name="check_results")
    op.drop_table("check_results")

    op.drop_index("ix_targets_updated_at", table_name="targets")
    op.drop_index("ix_targets_is_running", table_name="targets")
    op.drop_table("targets")
