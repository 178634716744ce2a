"""
Time arithmetic for availability windows.

Times are wall-clock "HH:MM" (24h) strings on a single canonical calendar day; dates are ISO
"YYYY-MM-DD". Intervals are half-open [start, start + duration), so back-to-back windows do
not overlap. Malformed input raises MalformedInput and is never clamped.
"""
import re
from collections import defaultdict
from datetime import date, datetime, time
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from meetmatch.config import settings
from meetmatch.core.errors import MalformedInput

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([0-9]{2}):([0-9]{2})$")
_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

# Fixed time options offered to users, grouped by period of day
FIXED_TIME_OPTIONS = ("09:00", "11:00", "13:00", "17:00", "19:00", "20:00", "21:00", "22:00")
TIME_PERIODS: dict[str, tuple[str, ...]] = {
    "MORNING": ("09:00", "11:00"),
    "NOON": ("13:00",),
    "AFTERNOON": ("17:00",),
    "EVENING": ("19:00", "20:00", "21:00", "22:00"),
}

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def to_minutes(value: str) -> int:
    """"HH:MM" -> minutes since midnight."""
    if not isinstance(value, str):
        raise MalformedInput(f"Time must be a HH:MM string, got {value!r}", field="time")
    m = _TIME_RE.match(value.strip())
    if not m:
        raise MalformedInput(f"Invalid time {value!r}. Use HH:MM (24h).", field="time")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise MalformedInput(f"Invalid time {value!r}. Use HH:MM (24h).", field="time")
    return hours * 60 + minutes


def from_minutes(total: int) -> str:
    """Minutes since midnight -> "HH:MM". 1440 renders as the end-of-day marker "24:00"."""
    if isinstance(total, bool) or not isinstance(total, int):
        raise MalformedInput(f"Minutes must be an integer, got {total!r}", field="minutes")
    if total < 0 or total > MINUTES_PER_DAY:
        raise MalformedInput(f"Minutes out of range for one day: {total}", field="minutes")
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(value: str, delta: int) -> str:
    return from_minutes(to_minutes(value) + delta)


def overlaps(start_a: str, duration_a: int, start_b: str, duration_b: int) -> bool:
    """True iff [start_a, start_a + duration_a) intersects [start_b, start_b + duration_b)."""
    a0 = to_minutes(start_a)
    b0 = to_minutes(start_b)
    return a0 < b0 + duration_b and a0 + duration_a > b0


def window_end(start: str, duration: int) -> str:
    return add_minutes(start, duration)


def parse_date(value: str) -> date:
    """"YYYY-MM-DD" -> date. Other ISO spellings (basic, week dates) are rejected."""
    if not isinstance(value, str):
        raise MalformedInput(f"Date must be a YYYY-MM-DD string, got {value!r}", field="date")
    if not _DATE_RE.match(value.strip()):
        raise MalformedInput(f"Invalid date {value!r}. Use YYYY-MM-DD.", field="date")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise MalformedInput(f"Invalid date {value!r}. Use YYYY-MM-DD.", field="date") from e


def window_start(day: str, start: str) -> datetime:
    """Naive datetime for the window start on the canonical calendar."""
    minutes = to_minutes(start)
    return datetime.combine(parse_date(day), time(minutes // 60, minutes % 60))


def is_past(day: str, start: str, now: datetime) -> bool:
    """
    True if the window starts strictly before `now` on the canonical calendar. An aware `now` is
    first converted to settings.calendar_timezone; a naive one is taken as already on it.
    """
    if now.tzinfo is not None:
        now = now.astimezone(ZoneInfo(settings.calendar_timezone))
    return window_start(day, start) < now.replace(tzinfo=None)


def format_window(day: str, start: str, duration: int) -> str:
    """E.g. "2025-06-01 (Sun) 10:00-10:15"."""
    weekday = _WEEKDAYS[parse_date(day).weekday()]
    return f"{day} ({weekday}) {start}-{window_end(start, duration)}"


def times_for_period(period: str) -> tuple[str, ...]:
    try:
        return TIME_PERIODS[period.upper()]
    except KeyError as e:
        raise MalformedInput(f"Unknown period {period!r}. Use one of {sorted(TIME_PERIODS)}.", field="period") from e


def _slot_key(slot: Any) -> tuple[str, str]:
    if isinstance(slot, dict):
        return slot["slot_date"], slot["time_of_day"]
    return slot.slot_date, slot.time_of_day


def sort_slots(slots: Iterable[Any]) -> list[Any]:
    """Sort slot rows or dicts by (date, time)."""
    return sorted(slots, key=_slot_key)


def group_by_date(slots: Iterable[Any]) -> dict[str, list[Any]]:
    groups: dict[str, list[Any]] = defaultdict(list)
    for slot in sort_slots(slots):
        groups[_slot_key(slot)[0]].append(slot)
    return dict(groups)
