from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


@lru_cache(maxsize=None)
def get_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValidationError(f"Unknown timezone: {name}") from exc


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from exc


def parse_hhmm(value: str) -> time:
    """Parse a wall-clock "HH:MM" (or "HH:MM:SS") string."""
    if isinstance(value, time):
        return value
    try:
        parts = [int(p) for p in str(value).strip().split(":")]
    except ValueError as exc:
        raise ValidationError(f"Invalid time: {value!r} (expected HH:MM)") from exc
    if len(parts) not in (2, 3):
        raise ValidationError(f"Invalid time: {value!r} (expected HH:MM)")
    try:
        return time(*parts)
    except ValueError as exc:
        raise ValidationError(f"Invalid time: {value!r} (expected HH:MM)") from exc


def parse_instant(value: str, tz: tzinfo) -> datetime:
    """Parse an ISO-8601 instant. Naive values are read in the organization timezone."""
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"Invalid timestamp: {value!r}") from exc
    return to_local(parsed, tz)


def format_hhmm(value: Union[time, datetime]) -> str:
    return value.strftime("%H:%M")


def format_duration_hhmm(delta: timedelta) -> str:
    minutes = max(0, int(delta.total_seconds() // 60))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def at(day: date, clock: time, tz: tzinfo) -> datetime:
    """Anchor a wall-clock time to a calendar date in the given timezone."""
    return datetime.combine(day, clock.replace(tzinfo=None), tzinfo=tz)


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return at(day, time.min, tz)


def end_of_day(day: date, tz: tzinfo) -> datetime:
    return at(day, time.max, tz)


def date_range(start: date, end: date) -> Iterator[date]:
    """Walk calendar dates from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def to_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


def elapsed(start: datetime, end: datetime) -> timedelta:
    """Real time between two aware instants.

    Datetimes sharing one tzinfo subtract on wall-clock time, which is off by
    the offset change when the span crosses a DST transition.
    """
    return to_utc(end) - to_utc(start)


def shift_by(value: datetime, delta: timedelta) -> datetime:
    """Move an instant by real elapsed time, keeping its timezone."""
    return (to_utc(value) + delta).astimezone(value.tzinfo)


def is_before(a: datetime, b: datetime) -> bool:
    return to_utc(a) < to_utc(b)


def earliest(*values: datetime) -> datetime:
    return min(values, key=to_utc)


def latest(*values: datetime) -> datetime:
    return max(values, key=to_utc)


def hours_between(start: datetime, end: datetime) -> float:
    return elapsed(start, end).total_seconds() / 3600


def overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> timedelta:
    return max(timedelta(0), elapsed(latest(a_start, b_start), earliest(a_end, b_end)))


def to_local(value: datetime, tz: tzinfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_date(value: datetime, tz: tzinfo) -> date:
    return to_local(value, tz).date()


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current time in the organization timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)
