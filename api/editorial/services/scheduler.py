"""Scheduler tick for page-level value finds.

Runs every few minutes. A schedule fires when it is enabled, its Eastern
hour matches with the minute within the tolerance, its weekday matches
(weekly schedules), and it has not already run today (daily) or this
week (weekly). Each sport runs independently.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..catalog.adapter import GameCatalog
from ..db.content import PageSchedule, ScheduleFrequency
from ..utils.datetime_utils import now_utc, to_eastern
from .content_store import ContentStore
from .generation import GenerationAdapter
from .page_analysis import generate_page_level_analysis

logger = logging.getLogger(__name__)

MINUTE_TOLERANCE = 5


def sunday_based_weekday(moment: datetime) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return (moment.weekday() + 1) % 7


def already_ran(schedule: PageSchedule, now_et: datetime) -> bool:
    if schedule.last_run_at is None:
        return False
    last_day = to_eastern(schedule.last_run_at).date()
    if schedule.schedule_frequency == ScheduleFrequency.daily.value:
        return last_day == now_et.date()
    week_start = now_et.date() - timedelta(days=sunday_based_weekday(now_et))
    return last_day >= week_start


def is_schedule_due(schedule: PageSchedule, now: datetime) -> bool:
    if not schedule.enabled or schedule.scheduled_time is None:
        return False
    now_et = to_eastern(now)
    target = schedule.scheduled_time
    if now_et.hour != target.hour or abs(now_et.minute - target.minute) > MINUTE_TOLERANCE:
        return False
    if (
        schedule.schedule_frequency != ScheduleFrequency.daily.value
        and sunday_based_weekday(now_et) != schedule.day_of_week
    ):
        return False
    return not already_ran(schedule, now_et)


async def run_due_schedules(
    store: ContentStore,
    catalog: GameCatalog,
    generator: GenerationAdapter,
    now: datetime | None = None,
) -> dict[str, str]:
    """Fire every due schedule. Returns a status per sport that was due."""
    now = now or now_utc()
    results: dict[str, str] = {}
    for schedule in await store.list_page_schedules():
        if not is_schedule_due(schedule, now):
            continue
        sport_type = schedule.sport_type
        try:
            bundle = await generate_page_level_analysis(
                store, catalog, generator, sport_type, generated_by="scheduler", now=now
            )
        except Exception as exc:
            # One sport's failure must not stop the others.
            logger.exception("scheduled_value_finds_failed", extra={"sport_type": sport_type})
            await store.rollback()
            results[sport_type] = f"failed: {exc}"
            continue
        results[sport_type] = f"generated bundle {bundle.id}"
    logger.info("scheduler_tick_complete", extra={"now": now.isoformat(), "results": results})
    return results
