"""Request and response models for the editorial routers."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..services.picks_classifier import ClassifiedPick, PickBuckets

# =============================================================================
# Completions and bulk runs
# =============================================================================


class BulkGenerateRequest(BaseModel):
    """Bulk generation for one sport, or every sport when omitted."""

    sport_type: str | None = Field(default=None, description="nfl, cfb, nba or ncaab")


class ItemOutcomeModel(BaseModel):
    sport_type: str
    slot_type: str
    game_id: str
    status: str
    reason: str | None = None


class BulkGenerateResponse(BaseModel):
    generated: int
    errors: int
    skipped: int
    cancelled: bool
    items: list[ItemOutcomeModel] = Field(default_factory=list)


class BulkGenerateAsyncResponse(BaseModel):
    job_id: str = Field(description="Unique job identifier for tracking progress")
    message: str
    status_url: str = Field(description="URL to poll for job status")


class BulkGenerateStatusResponse(BaseModel):
    job_id: str
    status: str
    sport_type: str | None
    total: int
    generated: int
    failed: int
    skipped: int
    cancel_requested: bool
    errors: list[dict[str, Any]] = Field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None


class GenerateCompletionRequest(BaseModel):
    sport_type: str
    game_id: str
    slot_type: str


class CompletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    game_id: str
    sport_type: str
    slot_type: str
    completion_text: str
    model_used: str | None = None
    generated_at: datetime | None = None


# =============================================================================
# Value finds
# =============================================================================


class ValueFindResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    sport_type: str
    analysis_date: date
    high_value_badges: list[dict[str, Any]] = Field(default_factory=list)
    editor_cards: list[dict[str, Any]] = Field(default_factory=list)
    value_picks: list[dict[str, Any]] = Field(default_factory=list)
    page_header: dict[str, Any] | None = Field(default=None, validation_alias="page_header_data")
    summary_text: str | None = None
    published: bool
    generated_by: str | None = None
    created_at: datetime | None = None


class ValueFindPublishRequest(BaseModel):
    published: bool


# =============================================================================
# Completion registry and schedules
# =============================================================================


class CompletionConfigResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sport_type: str
    slot_type: str
    system_prompt: str
    enabled: bool
    updated_by: str | None = None
    updated_at: datetime | None = None


class CompletionConfigUpdate(BaseModel):
    enabled: bool | None = None
    system_prompt: str | None = None
    updated_by: str | None = None


class PageScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sport_type: str
    scheduled_time: time
    enabled: bool
    system_prompt: str
    schedule_frequency: str
    day_of_week: int
    auto_publish: bool
    last_run_at: datetime | None = None


class PageScheduleUpdate(BaseModel):
    system_prompt: str | None = None
    enabled: bool | None = None
    scheduled_time: time | None = Field(default=None, description="Eastern wall time")
    schedule_frequency: Literal["daily", "weekly"] | None = None
    day_of_week: int | None = Field(default=None, ge=0, le=6, description="0 = Sunday")
    auto_publish: bool | None = None


# =============================================================================
# Editor picks
# =============================================================================


class EditorPickCreate(BaseModel):
    sport_type: str
    game_id: str
    selected_bet_type: Literal["spread", "over_under", "moneyline"]
    editors_notes: str | None = None
    editor_id: str | None = None
    best_price: str | None = None
    units: float | None = Field(default=None, gt=0)


class EditorPickPublishRequest(BaseModel):
    published: bool


class EditorPickResultRequest(BaseModel):
    result: Literal["pending", "won", "lost", "push"]
    best_price: str | None = None
    units: float | None = Field(default=None, gt=0)


class EditorPickResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    game_id: str
    sport_type: str
    editor_id: str | None = None
    selected_bet_type: str
    editors_notes: str | None = None
    is_published: bool
    result: str
    best_price: str | None = None
    units: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ClassifiedPickResponse(BaseModel):
    pick: EditorPickResponse
    game_status: str
    game_data: dict[str, Any]
    game_date: date | None = None
    is_past: bool

    @classmethod
    def from_classified(cls, entry: ClassifiedPick) -> "ClassifiedPickResponse":
        return cls(
            pick=EditorPickResponse.model_validate(entry.pick),
            game_status=entry.game_status,
            game_data=entry.game_data,
            game_date=entry.game_date,
            is_past=entry.is_past,
        )


class EditorPicksResponse(BaseModel):
    draft: list[ClassifiedPickResponse] = Field(default_factory=list)
    active: list[ClassifiedPickResponse] = Field(default_factory=list)
    historical: list[ClassifiedPickResponse] = Field(default_factory=list)

    @classmethod
    def from_buckets(cls, buckets: PickBuckets) -> "EditorPicksResponse":
        return cls(
            draft=[ClassifiedPickResponse.from_classified(entry) for entry in buckets.draft],
            active=[ClassifiedPickResponse.from_classified(entry) for entry in buckets.active],
            historical=[
                ClassifiedPickResponse.from_classified(entry) for entry in buckets.historical
            ],
        )


class PickStatsResponse(BaseModel):
    won: int
    lost: int
    push: int
    pending: int
    total: int
    win_rate: float | None
    units_won: float
    units_lost: float
    net_units: float
    cumulative: list[dict[str, Any]] = Field(default_factory=list)


# =============================================================================
# Read surface
# =============================================================================


class SlotTextResponse(BaseModel):
    slot_type: str
    text: str
    status: str
    is_fallback: bool
    generated_at: datetime | None = None


class GameCompletionsResponse(BaseModel):
    sport_type: str
    game_id: str
    completions: list[SlotTextResponse]
