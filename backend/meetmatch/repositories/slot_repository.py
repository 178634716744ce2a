"""Slot repository - database operations for availability slots.

Repository methods never commit; the calling service owns the transaction so a multi-step
change (meeting insert + two slot flips) commits or rolls back as one unit.
"""
from typing import Iterable, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from meetmatch.core.constants import SLOT_ACTIVE_STATES, SLOT_OPEN
from meetmatch.models.availability_slot import AvailabilitySlot


class SlotRepository:
    """Repository for availability slot database operations"""

    @staticmethod
    def get(db: Session, slot_id: str) -> Optional[AvailabilitySlot]:
        return db.query(AvailabilitySlot).filter(AvailabilitySlot.id == slot_id).first()

    @staticmethod
    def get_many(db: Session, slot_ids: Iterable[str]) -> dict[str, AvailabilitySlot]:
        """Fetch slots by id; returns {id: slot} for the ones that exist."""
        ids = list(set(slot_ids))
        if not ids:
            return {}
        rows = db.query(AvailabilitySlot).filter(AvailabilitySlot.id.in_(ids)).all()
        return {r.id: r for r in rows}

    @staticmethod
    def list_by_owner(
        db: Session,
        owner_id: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        state: Optional[str] = None,
    ) -> list[AvailabilitySlot]:
        """Owner's slots ordered by date then time, with optional date range and state filter."""
        query = db.query(AvailabilitySlot).filter(AvailabilitySlot.owner_id == owner_id)
        if date_from:
            query = query.filter(AvailabilitySlot.slot_date >= date_from)
        if date_to:
            query = query.filter(AvailabilitySlot.slot_date <= date_to)
        if state:
            query = query.filter(AvailabilitySlot.state == state)
        return query.order_by(AvailabilitySlot.slot_date.asc(), AvailabilitySlot.time_of_day.asc()).all()

    @staticmethod
    def list_active_for_owner_on_dates(db: Session, owner_id: str, dates: Iterable[str]) -> list[AvailabilitySlot]:
        """Non-withdrawn slots of the owner on any of the given dates (overlap checks)."""
        dates = list(set(dates))
        if not dates:
            return []
        return (
            db.query(AvailabilitySlot)
            .filter(
                AvailabilitySlot.owner_id == owner_id,
                AvailabilitySlot.slot_date.in_(dates),
                AvailabilitySlot.state.in_(SLOT_ACTIVE_STATES),
            )
            .all()
        )

    @staticmethod
    def list_open_matching(
        db: Session,
        slot_date: str,
        time_of_day: str,
        duration_minutes: int,
        exclude_owner_id: Optional[str] = None,
    ) -> list[AvailabilitySlot]:
        """Open slots with exactly this (date, time, duration)."""
        query = db.query(AvailabilitySlot).filter(
            AvailabilitySlot.slot_date == slot_date,
            AvailabilitySlot.time_of_day == time_of_day,
            AvailabilitySlot.duration_minutes == duration_minutes,
            AvailabilitySlot.state == SLOT_OPEN,
        )
        if exclude_owner_id is not None:
            query = query.filter(AvailabilitySlot.owner_id != exclude_owner_id)
        return query.order_by(AvailabilitySlot.created_at.asc(), AvailabilitySlot.id.asc()).all()

    @staticmethod
    def list_owners_with_open_slots(db: Session, date_from: str, limit: int) -> list[str]:
        rows = (
            db.query(AvailabilitySlot.owner_id)
            .filter(AvailabilitySlot.state == SLOT_OPEN, AvailabilitySlot.slot_date >= date_from)
            .distinct()
            .limit(limit)
            .all()
        )
        return [r[0] for r in rows]

    @staticmethod
    def lock_owner(db: Session, owner_id: str) -> None:
        """
        Serialize slot writes for one owner until the current transaction ends.
        Postgres: transaction-scoped advisory lock keyed on the owner. SQLite allows a single
        writer per database, so the insert itself is the lock there; callers re-check overlaps
        after flush either way.
        """
        if db.get_bind().dialect.name == "postgresql":
            db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": f"slots:{owner_id}"})

    @staticmethod
    def insert_many(db: Session, owner_id: str, windows: Iterable[tuple[str, str, int]]) -> list[AvailabilitySlot]:
        """Stage new open slots for (date, time, duration) windows. Flushes so ids are assigned."""
        rows = [
            AvailabilitySlot(
                owner_id=owner_id,
                slot_date=slot_date,
                time_of_day=time_of_day,
                duration_minutes=duration,
                state=SLOT_OPEN,
            )
            for slot_date, time_of_day, duration in windows
        ]
        db.add_all(rows)
        db.flush()
        return rows

    @staticmethod
    def transition_state(db: Session, slot_id: str, from_state: str, to_state: str) -> bool:
        """
        Conditional write: set state=to_state where id=slot_id and state=from_state.
        Returns True if the row changed. This is the only primitive that guards against double-booking.
        """
        updated = (
            db.query(AvailabilitySlot)
            .filter(AvailabilitySlot.id == slot_id, AvailabilitySlot.state == from_state)
            .update({AvailabilitySlot.state: to_state}, synchronize_session=False)
        )
        return updated == 1
