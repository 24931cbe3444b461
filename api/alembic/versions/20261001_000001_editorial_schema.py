"""Editorial content schema: completion registry, schedules, completions,
value finds, editor picks and bulk jobs. Seeds one config per sport x slot
and one (disabled) page schedule per sport.

Revision ID: 20261001_000001
Revises:
Create Date: 2026-10-01
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261001_000001"
down_revision = None
branch_labels = None
depends_on = None

SPORTS = ("nfl", "cfb", "nba", "ncaab")
SLOTS = ("spread_prediction", "ou_prediction", "moneyline_prediction")


def _timestamps(*names: str) -> list[sa.Column]:
    return [
        sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)
        for name in names
    ]


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    op.create_table(
        "ai_completion_configs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sport_type", sa.String(20), nullable=False),
        sa.Column("slot_type", sa.String(50), nullable=False),
        sa.Column("system_prompt", sa.Text(), server_default="", nullable=False),
        sa.Column("enabled", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("updated_by", sa.String(100), nullable=True),
        *_timestamps("created_at", "updated_at"),
        sa.UniqueConstraint("sport_type", "slot_type", name="uq_completion_config_sport_slot"),
    )

    op.create_table(
        "ai_page_level_schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sport_type", sa.String(20), nullable=False, unique=True),
        sa.Column("scheduled_time", sa.Time(), nullable=False),
        sa.Column("enabled", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("system_prompt", sa.Text(), server_default="", nullable=False),
        sa.Column("schedule_frequency", sa.String(10), server_default="weekly", nullable=False),
        sa.Column("day_of_week", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("auto_publish", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("last_run_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps("updated_at"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_page_schedule_day_of_week"),
        sa.CheckConstraint(
            "schedule_frequency IN ('daily', 'weekly')", name="ck_page_schedule_frequency"
        ),
    )

    op.create_table(
        "ai_completions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("game_id", sa.String(100), nullable=False),
        sa.Column("sport_type", sa.String(20), nullable=False),
        sa.Column("slot_type", sa.String(50), nullable=False),
        sa.Column("completion_text", sa.Text(), nullable=False),
        sa.Column("data_payload", postgresql.JSONB(), nullable=True),
        sa.Column("model_used", sa.String(50), nullable=True),
        *_timestamps("generated_at"),
        sa.UniqueConstraint(
            "game_id", "sport_type", "slot_type", name="uq_completion_game_sport_slot"
        ),
    )
    op.create_index("idx_completions_sport_slot", "ai_completions", ["sport_type", "slot_type"])

    op.create_table(
        "ai_value_finds",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sport_type", sa.String(20), nullable=False),
        sa.Column("analysis_date", sa.Date(), nullable=False),
        sa.Column("high_value_badges", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("editor_cards", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("value_picks", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("page_header_data", postgresql.JSONB(), nullable=True),
        sa.Column("summary_text", sa.Text(), nullable=True),
        sa.Column("analysis_json", postgresql.JSONB(), nullable=True),
        sa.Column("published", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("generated_by", sa.String(100), nullable=True),
        *_timestamps("created_at"),
    )
    op.create_index("idx_value_finds_sport_created", "ai_value_finds", ["sport_type", "created_at"])
    op.create_index("idx_value_finds_sport_published", "ai_value_finds", ["sport_type", "published"])

    op.create_table(
        "editors_picks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("game_id", sa.String(100), nullable=False),
        sa.Column("sport_type", sa.String(20), nullable=False),
        sa.Column("editor_id", sa.String(100), nullable=True),
        sa.Column("selected_bet_type", sa.String(20), nullable=False),
        sa.Column("editors_notes", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("result", sa.String(10), server_default="pending", nullable=False),
        sa.Column("best_price", sa.String(20), nullable=True),
        sa.Column("units", sa.Float(), nullable=True),
        sa.Column("archived_game_data", postgresql.JSONB(), nullable=True),
        *_timestamps("created_at", "updated_at"),
    )
    op.create_index("ix_editors_picks_created_at", "editors_picks", ["created_at"])
    op.create_index("idx_editors_picks_sport_game", "editors_picks", ["sport_type", "game_id"])
    op.create_index("idx_editors_picks_published", "editors_picks", ["is_published"])

    op.create_table(
        "editor_pick_votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "pick_id",
            sa.Integer(),
            sa.ForeignKey("editors_picks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(100), nullable=False),
        sa.Column("vote", sa.String(10), nullable=False),
        *_timestamps("created_at"),
        sa.UniqueConstraint("pick_id", "user_id", name="uq_editor_pick_vote_user"),
    )
    op.create_index("ix_editor_pick_votes_pick_id", "editor_pick_votes", ["pick_id"])

    op.create_table(
        "bulk_completion_jobs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "job_uuid",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("sport_type", sa.String(20), nullable=True),
        sa.Column("total_items", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("generated", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("failed", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("skipped", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("errors_json", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("cancel_requested", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("triggered_by", sa.String(100), nullable=True),
        sa.Column("celery_task_id", sa.String(100), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps("created_at"),
    )
    op.create_index("idx_bulk_completion_jobs_uuid", "bulk_completion_jobs", ["job_uuid"], unique=True)
    op.create_index("ix_bulk_completion_jobs_status", "bulk_completion_jobs", ["status"])
    op.create_index("ix_bulk_completion_jobs_created_at", "bulk_completion_jobs", ["created_at"])

    for sport in SPORTS:
        for slot in SLOTS:
            op.execute(
                sa.text(
                    "INSERT INTO ai_completion_configs (sport_type, slot_type, system_prompt) "
                    "VALUES (:sport, :slot, '') ON CONFLICT (sport_type, slot_type) DO NOTHING"
                ).bindparams(sport=sport, slot=slot)
            )
        op.execute(
            sa.text(
                "INSERT INTO ai_page_level_schedules (sport_type, scheduled_time) "
                "VALUES (:sport, '09:00') ON CONFLICT (sport_type) DO NOTHING"
            ).bindparams(sport=sport)
        )


def downgrade() -> None:
    op.drop_table("bulk_completion_jobs")
    op.drop_table("editor_pick_votes")
    op.drop_table("editors_picks")
    op.drop_table("ai_value_finds")
    op.drop_table("ai_completions")
    op.drop_table("ai_page_level_schedules")
    op.drop_table("ai_completion_configs")
