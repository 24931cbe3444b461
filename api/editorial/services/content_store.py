"""Persistence boundary for generated content, configs, schedules and picks.

Services talk to a ``ContentStore`` rather than a session so the
reconciliation and publication logic can run against an in-memory store
in tests. ``SqlContentStore`` is the PostgreSQL implementation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Protocol, Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.content import Completion, CompletionConfig, PageSchedule, ValueFindBundle
from ..db.jobs import BulkCompletionJob
from ..db.picks import EditorPick, EditorPickVote


class ContentStore(Protocol):
    # Completion registry
    async def list_completion_configs(self, sport_type: str | None = None) -> list[CompletionConfig]: ...
    async def get_completion_config(self, config_id: int) -> CompletionConfig | None: ...
    async def get_slot_config(self, sport_type: str, slot_type: str) -> CompletionConfig | None: ...

    # Completions
    async def existing_completion_ids(
        self, sport_type: str, slot_type: str, game_ids: Sequence[str]
    ) -> set[str]: ...
    async def completions_for_games(
        self, sport_type: str, game_ids: Sequence[str]
    ) -> dict[str, list[Completion]]: ...
    async def upsert_completion(
        self,
        *,
        sport_type: str,
        game_id: str,
        slot_type: str,
        completion_text: str,
        data_payload: dict[str, Any] | None,
        model_used: str | None,
        generated_at: datetime,
    ) -> Completion: ...

    # Schedules
    async def list_page_schedules(self) -> list[PageSchedule]: ...
    async def get_page_schedule(self, sport_type: str) -> PageSchedule | None: ...

    # Value finds
    async def add_value_find(self, bundle: ValueFindBundle) -> ValueFindBundle: ...
    async def get_value_find(self, bundle_id: int) -> ValueFindBundle | None: ...
    async def latest_value_find(
        self, sport_type: str, *, published_only: bool = False
    ) -> ValueFindBundle | None: ...
    async def delete_value_find(self, bundle: ValueFindBundle) -> None: ...

    # Editor picks
    async def list_editor_picks(self, *, published_only: bool = False) -> list[EditorPick]: ...
    async def get_editor_pick(self, pick_id: int) -> EditorPick | None: ...
    async def add_editor_pick(self, pick: EditorPick) -> EditorPick: ...
    async def delete_editor_pick(self, pick: EditorPick) -> None: ...

    # Bulk jobs
    async def add_job(self, job: BulkCompletionJob) -> BulkCompletionJob: ...
    async def get_job(self, job_uuid: UUID) -> BulkCompletionJob | None: ...
    async def refresh_job(self, job: BulkCompletionJob) -> BulkCompletionJob: ...

    # Unit of work
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...


class SqlContentStore:
    """``ContentStore`` over an ``AsyncSession``. Callers own the transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_completion_configs(self, sport_type: str | None = None) -> list[CompletionConfig]:
        stmt = select(CompletionConfig).order_by(CompletionConfig.sport_type, CompletionConfig.slot_type)
        if sport_type:
            stmt = stmt.where(CompletionConfig.sport_type == sport_type)
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_completion_config(self, config_id: int) -> CompletionConfig | None:
        return await self.session.get(CompletionConfig, config_id)

    async def get_slot_config(self, sport_type: str, slot_type: str) -> CompletionConfig | None:
        stmt = select(CompletionConfig).where(
            CompletionConfig.sport_type == sport_type,
            CompletionConfig.slot_type == slot_type,
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def existing_completion_ids(
        self, sport_type: str, slot_type: str, game_ids: Sequence[str]
    ) -> set[str]:
        if not game_ids:
            return set()
        stmt = select(Completion.game_id).where(
            Completion.sport_type == sport_type,
            Completion.slot_type == slot_type,
            Completion.game_id.in_(list(game_ids)),
        )
        return set((await self.session.execute(stmt)).scalars().all())

    async def completions_for_games(
        self, sport_type: str, game_ids: Sequence[str]
    ) -> dict[str, list[Completion]]:
        grouped: dict[str, list[Completion]] = {game_id: [] for game_id in game_ids}
        if not game_ids:
            return grouped
        stmt = (
            select(Completion)
            .where(Completion.sport_type == sport_type, Completion.game_id.in_(list(game_ids)))
            .order_by(Completion.slot_type)
        )
        for completion in (await self.session.execute(stmt)).scalars().all():
            grouped.setdefault(completion.game_id, []).append(completion)
        return grouped

    async def upsert_completion(
        self,
        *,
        sport_type: str,
        game_id: str,
        slot_type: str,
        completion_text: str,
        data_payload: dict[str, Any] | None,
        model_used: str | None,
        generated_at: datetime,
    ) -> Completion:
        values = {
            "completion_text": completion_text,
            "data_payload": data_payload,
            "model_used": model_used,
            "generated_at": generated_at,
        }
        stmt = (
            insert(Completion)
            .values(game_id=game_id, sport_type=sport_type, slot_type=slot_type, **values)
            .on_conflict_do_update(
                index_elements=["game_id", "sport_type", "slot_type"],
                set_=values,
            )
            .returning(Completion)
            .execution_options(populate_existing=True)
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def list_page_schedules(self) -> list[PageSchedule]:
        stmt = select(PageSchedule).order_by(PageSchedule.sport_type)
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_page_schedule(self, sport_type: str) -> PageSchedule | None:
        stmt = select(PageSchedule).where(PageSchedule.sport_type == sport_type)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def add_value_find(self, bundle: ValueFindBundle) -> ValueFindBundle:
        self.session.add(bundle)
        await self.session.flush()
        await self.session.refresh(bundle)
        return bundle

    async def get_value_find(self, bundle_id: int) -> ValueFindBundle | None:
        return await self.session.get(ValueFindBundle, bundle_id)

    async def latest_value_find(
        self, sport_type: str, *, published_only: bool = False
    ) -> ValueFindBundle | None:
        stmt = select(ValueFindBundle).where(ValueFindBundle.sport_type == sport_type)
        if published_only:
            stmt = stmt.where(ValueFindBundle.published.is_(True))
        stmt = stmt.order_by(ValueFindBundle.created_at.desc(), ValueFindBundle.id.desc()).limit(1)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def delete_value_find(self, bundle: ValueFindBundle) -> None:
        await self.session.delete(bundle)
        await self.session.flush()

    async def list_editor_picks(self, *, published_only: bool = False) -> list[EditorPick]:
        stmt = select(EditorPick).order_by(EditorPick.created_at.desc())
        if published_only:
            stmt = stmt.where(EditorPick.is_published.is_(True))
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_editor_pick(self, pick_id: int) -> EditorPick | None:
        return await self.session.get(EditorPick, pick_id)

    async def add_editor_pick(self, pick: EditorPick) -> EditorPick:
        self.session.add(pick)
        await self.session.flush()
        await self.session.refresh(pick)
        return pick

    async def delete_editor_pick(self, pick: EditorPick) -> None:
        # Votes first; the pick row must never be left with dangling votes.
        await self.session.execute(delete(EditorPickVote).where(EditorPickVote.pick_id == pick.id))
        await self.session.delete(pick)
        await self.session.flush()

    async def add_job(self, job: BulkCompletionJob) -> BulkCompletionJob:
        self.session.add(job)
        await self.session.flush()
        await self.session.refresh(job)
        return job

    async def get_job(self, job_uuid: UUID) -> BulkCompletionJob | None:
        stmt = select(BulkCompletionJob).where(BulkCompletionJob.job_uuid == job_uuid)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def refresh_job(self, job: BulkCompletionJob) -> BulkCompletionJob:
        await self.session.refresh(job)
        return job

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def group_completions_by_slot(completions: Iterable[Completion]) -> dict[str, Completion]:
    return {completion.slot_type: completion for completion in completions}
