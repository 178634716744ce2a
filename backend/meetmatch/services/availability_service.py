"""
Availability: submit windows as open slots, withdraw open slots, list a user's slots.

A submission is all-or-nothing: every window is validated (shape, not in the past, no overlap
with the owner's non-withdrawn slots or with another window of the same batch) before anything
is written, and the batch is inserted in one transaction.
"""
import logging
from datetime import datetime
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from meetmatch.config import settings
from meetmatch.core.constants import SLOT_OPEN, SLOT_STATES, SLOT_WITHDRAWN
from meetmatch.core.errors import ConflictingWindow, InvalidState, MalformedInput, NotFound, PastWindow, Unauthorized
from meetmatch.core.time_utils import format_window, is_past, overlaps, parse_date
from meetmatch.models.availability_slot import AvailabilitySlot
from meetmatch.repositories.slot_repository import SlotRepository
from meetmatch.services.windows import Window, parse_window

logger = logging.getLogger(__name__)


def calendar_now() -> datetime:
    """Current time on the canonical calendar (settings.calendar_timezone)."""
    return datetime.now(ZoneInfo(settings.calendar_timezone))


def _check_overlaps(windows: list[Window], existing: list[AvailabilitySlot]) -> None:
    for index, w in enumerate(windows):
        for slot in existing:
            if slot.slot_date == w.date and overlaps(w.time, w.duration, slot.time_of_day, slot.duration_minutes):
                raise ConflictingWindow(
                    f"Window {format_window(w.date, w.time, w.duration)} overlaps existing slot {slot.id}",
                    index=index,
                    window=w.to_dict(),
                    conflicting_slot_id=slot.id,
                )
        for earlier_index, earlier in enumerate(windows[:index]):
            if earlier.date == w.date and overlaps(w.time, w.duration, earlier.time, earlier.duration):
                raise ConflictingWindow(
                    f"Window {format_window(w.date, w.time, w.duration)} overlaps window #{earlier_index} of the same submission",
                    index=index,
                    window=w.to_dict(),
                    conflicting_index=earlier_index,
                )


def _check_batch(windows: list[Window], existing: list[AvailabilitySlot], now: datetime) -> None:
    for index, w in enumerate(windows):
        if is_past(w.date, w.time, now):
            raise PastWindow(f"Window {w.date} {w.time} is in the past", index=index, window=w.to_dict())
    _check_overlaps(windows, existing)


def submit_availability(
    db: Session,
    owner_id: str,
    windows: Iterable[Window | dict],
    now: datetime | None = None,
) -> list[AvailabilitySlot]:
    """
    Persist windows as open slots. Raises MalformedInput, PastWindow or ConflictingWindow and writes nothing on error.

    Writes for one owner are serialized (SlotRepository.lock_owner), and the overlap check runs
    again after the insert is flushed, so two concurrent submissions cannot both store
    overlapping slots; the later one gets ConflictingWindow.
    """
    parsed = [parse_window(w) for w in windows]
    if not parsed:
        raise MalformedInput("At least one window is required")
    now = now or calendar_now()
    dates = {w.date for w in parsed}

    try:
        SlotRepository.lock_owner(db, owner_id)
        _check_batch(parsed, SlotRepository.list_active_for_owner_on_dates(db, owner_id, dates), now)
        rows = SlotRepository.insert_many(db, owner_id, (w.triple for w in parsed))
        new_ids = {r.id for r in rows}
        others = [s for s in SlotRepository.list_active_for_owner_on_dates(db, owner_id, dates) if s.id not in new_ids]
        _check_overlaps(parsed, others)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for row in rows:
        db.refresh(row)
    logger.info("Owner %s submitted %s window(s): %s", owner_id, len(rows), [r.id for r in rows])
    return rows


def withdraw_availability(db: Session, slot_id: str, owner_id: str) -> None:
    """Withdraw an open slot. Reserved or completed slots cannot be withdrawn."""
    slot = SlotRepository.get(db, slot_id)
    if slot is None:
        raise NotFound(f"Slot {slot_id} not found", slot_id=slot_id)
    if slot.owner_id != owner_id:
        raise Unauthorized("Only the owner can withdraw a slot", slot_id=slot_id)
    if slot.state != SLOT_OPEN:
        raise InvalidState(f"Only open slots can be withdrawn (slot is {slot.state})", slot_id=slot_id, state=slot.state)
    # State may have moved since the read (a concurrent commit reserved it)
    if not SlotRepository.transition_state(db, slot_id, SLOT_OPEN, SLOT_WITHDRAWN):
        db.rollback()
        current = SlotRepository.get(db, slot_id)
        raise InvalidState(
            "Slot is no longer open",
            slot_id=slot_id,
            state=current.state if current else None,
        )
    db.commit()
    logger.info("Owner %s withdrew slot %s", owner_id, slot_id)


def list_availability(
    db: Session,
    owner_id: str,
    date_from: str | None = None,
    date_to: str | None = None,
    status: str | None = None,
) -> list[AvailabilitySlot]:
    if date_from:
        date_from = parse_date(date_from).isoformat()
    if date_to:
        date_to = parse_date(date_to).isoformat()
    if status and status not in SLOT_STATES:
        raise MalformedInput(f"Unknown slot status {status!r}. Use one of {list(SLOT_STATES)}.", field="status")
    return SlotRepository.list_by_owner(db, owner_id, date_from=date_from, date_to=date_to, state=status)


def slots_to_dicts(slots: Iterable[AvailabilitySlot]) -> list[dict[str, Any]]:
    return [s.to_dict() for s in slots]
