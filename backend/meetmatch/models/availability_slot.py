"""A window of time a user declared open for a 1:1 meeting. Soft state only (withdrawn rows are kept)."""
import uuid

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlalchemy.sql import func

from meetmatch.db.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class AvailabilitySlot(Base):
    __tablename__ = "availability_slots"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_id = Column(String(64), nullable=False, index=True)
    slot_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time_of_day = Column(String(5), nullable=False)  # HH:MM, 24h
    duration_minutes = Column(Integer, nullable=False)
    state = Column(String(16), nullable=False, default="open")  # open | reserved | completed | withdrawn
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        # Candidate lookup: exact (date, time, duration) among open slots
        Index("ix_availability_slots_triple_state", "slot_date", "time_of_day", "duration_minutes", "state"),
        Index("ix_availability_slots_owner_date", "owner_id", "slot_date"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "date": self.slot_date,
            "time": self.time_of_day,
            "duration": self.duration_minutes,
            "state": self.state,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
