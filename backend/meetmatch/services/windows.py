"""Caller-facing window (date + time + duration) before it becomes a slot, and its validation."""
from dataclasses import dataclass
from typing import Any, Iterable

from meetmatch.config import settings
from meetmatch.core.errors import MalformedInput
from meetmatch.core.time_utils import MINUTES_PER_DAY, from_minutes, parse_date, to_minutes


@dataclass(frozen=True)
class Window:
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    duration: int  # minutes

    @property
    def triple(self) -> tuple[str, str, int]:
        return (self.date, self.time, self.duration)

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "time": self.time, "duration": self.duration}


def parse_window(raw: Any, allowed_durations: Iterable[int] | None = None) -> Window:
    """
    Validate a window given as Window or {date, time, duration} mapping.
    Raises MalformedInput for bad date/time, a duration outside the allowed set, or a window
    that runs past the end of its day.
    """
    if isinstance(raw, Window):
        day, start, duration = raw.date, raw.time, raw.duration
    elif isinstance(raw, dict):
        day, start, duration = raw.get("date"), raw.get("time"), raw.get("duration")
    else:
        raise MalformedInput(f"Window must be a mapping with date, time, duration; got {type(raw).__name__}")
    day_value = parse_date(day)
    start_minutes = to_minutes(start)
    allowed = list(allowed_durations if allowed_durations is not None else settings.allowed_durations)
    if isinstance(duration, bool) or not isinstance(duration, int) or duration not in allowed:
        raise MalformedInput(f"Invalid duration {duration!r}. Use one of {allowed}.", field="duration")
    if start_minutes + duration > MINUTES_PER_DAY:
        raise MalformedInput(f"Window {day} {start} (+{duration}m) runs past midnight.", field="time")
    # One spelling per day and time: slots are compared as strings
    return Window(date=day_value.isoformat(), time=from_minutes(start_minutes), duration=duration)
