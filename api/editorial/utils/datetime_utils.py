"""Datetime helpers for the editorial pipeline.

DATE CONVENTION:
Game days are Eastern Time (America/New_York) days. A 10pm ET kickoff on
Nov 20 is a "Nov 20 game" regardless of the UTC date. Feed values that
carry no zone (date-only, or a local date plus a local time) are read as
Eastern wall time.

Stored timestamps and API responses are UTC (ISO 8601).
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

EASTERN = ZoneInfo("America/New_York")


def now_utc() -> datetime:
    """Get the current time in UTC, timezone-aware."""
    return datetime.now(timezone.utc)


def today_eastern(now: datetime | None = None) -> date:
    """Return the current Eastern calendar date (or the Eastern date of ``now``)."""
    return to_eastern(now or now_utc()).date()


def to_eastern(value: datetime) -> datetime:
    """Convert a datetime to Eastern. Naive values are taken as Eastern wall time."""
    if value.tzinfo is None:
        return value.replace(tzinfo=EASTERN)
    return value.astimezone(EASTERN)


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _parse_time_of_day(value: str) -> time | None:
    cleaned = value.strip().upper()
    for fmt in ("%H:%M:%S", "%H:%M", "%I:%M %p", "%I:%M%p", "%I:%M:%S %p"):
        try:
            return datetime.strptime(cleaned, fmt).time()
        except ValueError:
            continue
    return None


def parse_feed_datetime(
    value: str | date | datetime | None,
    time_value: str | time | None = None,
) -> tuple[datetime | None, bool]:
    """Resolve a feed timestamp to an Eastern datetime.

    Accepts the three shapes the upstream feeds use:
    - date-only ("2025-11-20"), optionally paired with a separate local
      time-of-day ("20:15", "8:15 PM")
    - combined local ("2025-11-20T20:15:00", "2025-11-20 20:15" or
      "2025-11-20 8:15 PM")
    - full ISO with offset ("2025-11-21T01:15:00+00:00", "...Z")

    Returns ``(kickoff, has_time)``. ``has_time`` is False when only a day
    is known; the kickoff is then midnight Eastern on that day.
    """
    if value is None or value == "":
        return None, False

    if isinstance(value, datetime):
        return to_eastern(value), True

    if isinstance(value, date):
        day = value
    else:
        text = value.strip()
        if len(text) > 10:
            iso = text.replace("Z", "+00:00").replace(" ", "T", 1)
            try:
                return to_eastern(datetime.fromisoformat(iso)), True
            except ValueError:
                # Local date plus a 12-hour time, e.g. "2025-11-20 8:15 PM".
                if not time_value:
                    time_value = text[10:].lstrip("T ")
        day = _parse_date(text)
        if day is None:
            return None, False

    parsed_time: time | None = None
    if isinstance(time_value, time):
        parsed_time = time_value
    elif isinstance(time_value, str) and time_value.strip():
        parsed_time = _parse_time_of_day(time_value)

    if parsed_time is None:
        return datetime.combine(day, time.min, tzinfo=EASTERN), False
    return datetime.combine(day, parsed_time.replace(tzinfo=None), tzinfo=EASTERN), True
