"""Generation Adapter.

Sends ``{system prompt, JSON payload}`` to the text-generation model and
validates the JSON it returns against a fixed artifact schema.

The adapter never retries. A timeout, an API failure, or a response that
does not match the schema raises ``GenerationError``; batch callers count
it and move on.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Annotated, Any, Literal, TypeVar

from openai import AsyncOpenAI
from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from ..config import get_settings
from .errors import GenerationError

logger = logging.getLogger(__name__)

ArtifactT = TypeVar("ArtifactT", bound=BaseModel)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)

SLOT_OUTPUT_INSTRUCTIONS = (
    'Respond with a JSON object of the form {"explanation": "<2-4 sentences>"}.'
)
VALUE_FINDS_OUTPUT_INSTRUCTIONS = (
    "Respond with a JSON object with keys high_value_badges, editor_cards, "
    "value_picks, page_header {summary_text, compact_picks} and summary_text."
)


def _as_game_id(value: Any) -> Any:
    return str(value) if isinstance(value, (int, float)) else value


GameId = Annotated[str, BeforeValidator(_as_game_id)]


class SlotArtifact(BaseModel):
    """Per-game slot explanation."""

    model_config = ConfigDict(extra="ignore")

    explanation: str = Field(..., min_length=1)


class HighValueBadge(BaseModel):
    model_config = ConfigDict(extra="ignore")

    game_id: GameId
    recommended_pick: str
    confidence: int = Field(..., ge=1, le=10)
    tooltip_text: str = ""


class CompactPick(BaseModel):
    model_config = ConfigDict(extra="ignore")

    game_id: GameId
    matchup: str
    pick: str


class PageHeader(BaseModel):
    model_config = ConfigDict(extra="ignore")

    summary_text: str
    compact_picks: list[CompactPick] = Field(default_factory=list)


class EditorCard(BaseModel):
    model_config = ConfigDict(extra="ignore")

    game_id: GameId
    matchup: str
    bet_type: Literal["spread", "ml", "ou"]
    recommended_pick: str
    confidence: int = Field(..., ge=1, le=10)
    key_factors: list[str] = Field(default_factory=list)
    explanation: str


class ValueFindArtifact(BaseModel):
    """Page-level value-find bundle."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    high_value_badges: list[HighValueBadge] = Field(
        default_factory=list, validation_alias=AliasChoices("high_value_badges", "badges")
    )
    editor_cards: list[EditorCard] = Field(default_factory=list)
    value_picks: list[dict[str, Any]] = Field(default_factory=list)
    page_header: PageHeader | None = None
    summary_text: str | None = None
    total_games_analyzed: int | None = None

    @property
    def effective_summary(self) -> str | None:
        if self.summary_text:
            return self.summary_text
        return self.page_header.summary_text if self.page_header else None


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    match = _FENCE_RE.match(content)
    return match.group(1) if match else content.strip()


def parse_artifact(content: str | None, schema: type[ArtifactT]) -> ArtifactT:
    """Parse raw model output into ``schema`` or raise ``GenerationError``."""
    if not content or not content.strip():
        raise GenerationError("Generation returned an empty response", kind="malformed")
    try:
        raw = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as exc:
        raise GenerationError(f"Generation returned invalid JSON: {exc}", kind="malformed") from exc
    if not isinstance(raw, dict):
        raise GenerationError("Generation returned a non-object JSON value", kind="malformed")
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        raise GenerationError(
            f"Generation output does not match {schema.__name__}: {exc.error_count()} error(s)",
            kind="malformed",
        ) from exc


class GenerationAdapter:
    """Thin async wrapper around the chat completions API."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> None:
        settings = get_settings()
        self._client = client
        self.model = model or settings.openai_model
        self.timeout_seconds = timeout_seconds or settings.generation_timeout_seconds
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            api_key = get_settings().openai_api_key
            if not api_key:
                raise GenerationError("OPENAI_API_KEY is not configured", kind="not_configured")
            self._client = AsyncOpenAI(api_key=api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        payload: dict[str, Any],
        schema: type[ArtifactT],
        output_instructions: str = "",
    ) -> ArtifactT:
        client = self._get_client()
        system_prompt = f"{prompt}\n\n{output_instructions}".strip()
        user_content = json.dumps(payload, default=str)

        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_content},
                    ],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    response_format={"type": "json_object"},
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "generation_timeout",
                extra={"model": self.model, "timeout_seconds": self.timeout_seconds},
            )
            raise GenerationError(
                f"Generation timed out after {self.timeout_seconds}s", kind="timeout"
            ) from exc
        except GenerationError:
            raise
        except Exception as exc:
            logger.error("generation_api_call_failed", extra={"model": self.model, "error": str(exc)})
            raise GenerationError(f"Generation API call failed: {exc}", kind="api_error") from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise GenerationError("Generation response had no choices", kind="malformed") from exc

        artifact = parse_artifact(content, schema)
        logger.debug(
            "generation_complete",
            extra={"model": self.model, "schema": schema.__name__, "chars": len(content or "")},
        )
        return artifact

    async def generate_slot(self, prompt: str, payload: dict[str, Any]) -> SlotArtifact:
        return await self.generate(prompt, payload, SlotArtifact, SLOT_OUTPUT_INSTRUCTIONS)

    async def generate_value_finds(self, prompt: str, payload: dict[str, Any]) -> ValueFindArtifact:
        return await self.generate(
            prompt, payload, ValueFindArtifact, VALUE_FINDS_OUTPUT_INSTRUCTIONS
        )


_adapter: GenerationAdapter | None = None


def get_generation_adapter() -> GenerationAdapter:
    """Process-wide adapter; the OpenAI client is created on first use."""
    global _adapter
    if _adapter is None:
        _adapter = GenerationAdapter()
    return _adapter
