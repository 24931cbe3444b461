"""Editor pick models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import text

from .base import Base


class BetType(str, Enum):
    spread = "spread"
    over_under = "over_under"
    moneyline = "moneyline"


class PickResult(str, Enum):
    pending = "pending"
    won = "won"
    lost = "lost"
    push = "push"


class EditorPick(Base):
    """An editor's pick on one game. Draft until ``is_published`` is set."""

    __tablename__ = "editors_picks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    game_id: Mapped[str] = mapped_column(String(100), nullable=False)
    sport_type: Mapped[str] = mapped_column(String(20), nullable=False)
    editor_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    selected_bet_type: Mapped[str] = mapped_column(String(20), nullable=False)
    editors_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    result: Mapped[str] = mapped_column(
        String(10), nullable=False, server_default=PickResult.pending.value
    )
    best_price: Mapped[str | None] = mapped_column(String(20), nullable=True)
    units: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Snapshot of the game when the pick was made; used once the feed drops the game.
    archived_game_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    votes: Mapped[list["EditorPickVote"]] = relationship(
        "EditorPickVote", back_populates="pick", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_editors_picks_sport_game", "sport_type", "game_id"),
        Index("idx_editors_picks_published", "is_published"),
    )


class EditorPickVote(Base):
    """A reader's vote on an editor pick."""

    __tablename__ = "editor_pick_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    pick_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("editors_picks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    vote: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    pick: Mapped[EditorPick] = relationship("EditorPick", back_populates="votes")

    __table_args__ = (
        UniqueConstraint("pick_id", "user_id", name="uq_editor_pick_vote_user"),
    )
