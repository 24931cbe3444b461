"""Generated-content models: completion registry, page schedules, completions, value finds."""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import text

from .base import Base


class SlotType(str, Enum):
    """Known per-game content slots."""

    spread_prediction = "spread_prediction"
    ou_prediction = "ou_prediction"
    moneyline_prediction = "moneyline_prediction"


class ScheduleFrequency(str, Enum):
    daily = "daily"
    weekly = "weekly"


class CompletionConfig(Base):
    """Per-(sport, slot) generation config. ``enabled`` is the slot kill switch."""

    __tablename__ = "ai_completion_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sport_type: Mapped[str] = mapped_column(String(20), nullable=False)
    slot_type: Mapped[str] = mapped_column(String(50), nullable=False)
    system_prompt: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    updated_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("sport_type", "slot_type", name="uq_completion_config_sport_slot"),
    )


class PageSchedule(Base):
    """Page-level value-find schedule, one row per sport.

    ``scheduled_time`` is Eastern wall time. ``day_of_week`` uses
    0 = Sunday .. 6 = Saturday and only applies to weekly schedules.
    """

    __tablename__ = "ai_page_level_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sport_type: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    scheduled_time: Mapped[time] = mapped_column(Time, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    system_prompt: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    schedule_frequency: Mapped[str] = mapped_column(
        String(10), nullable=False, server_default=ScheduleFrequency.weekly.value
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    auto_publish: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    last_run_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class Completion(Base):
    """One generated explanation for a (game, slot). Upserted, never duplicated."""

    __tablename__ = "ai_completions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    game_id: Mapped[str] = mapped_column(String(100), nullable=False)
    sport_type: Mapped[str] = mapped_column(String(20), nullable=False)
    slot_type: Mapped[str] = mapped_column(String(50), nullable=False)
    completion_text: Mapped[str] = mapped_column(Text, nullable=False)
    data_payload: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    model_used: Mapped[str | None] = mapped_column(String(50), nullable=True)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "game_id", "sport_type", "slot_type", name="uq_completion_game_sport_slot"
        ),
        Index("idx_completions_sport_slot", "sport_type", "slot_type"),
    )


class ValueFindBundle(Base):
    """Page-level generated analysis for one sport. Newest row is current."""

    __tablename__ = "ai_value_finds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sport_type: Mapped[str] = mapped_column(String(20), nullable=False)
    analysis_date: Mapped[date] = mapped_column(Date, nullable=False)
    high_value_badges: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, server_default=text("'[]'::jsonb")
    )
    editor_cards: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, server_default=text("'[]'::jsonb")
    )
    value_picks: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, server_default=text("'[]'::jsonb")
    )
    page_header_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    summary_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    analysis_json: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    generated_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_value_finds_sport_created", "sport_type", "created_at"),
        Index("idx_value_finds_sport_published", "sport_type", "published"),
    )
