"""A committed two-party meeting. Date/time/duration are copied from the slots at commit and never change."""
import uuid

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from meetmatch.db.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(String(36), primary_key=True, default=_uuid)
    party_a_id = Column(String(64), nullable=False, index=True)
    party_b_id = Column(String(64), nullable=False, index=True)
    slot_a_id = Column(String(36), ForeignKey("availability_slots.id"), nullable=False, index=True)
    slot_b_id = Column(String(36), ForeignKey("availability_slots.id"), nullable=False, index=True)
    meeting_date = Column(String(10), nullable=False)
    meeting_time = Column(String(5), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    compatibility_score = Column(Float, nullable=True)
    compatibility_reasons = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)  # oracle payload, stored for display/audit
    state = Column(String(16), nullable=False, default="scheduled")  # scheduled | completed | cancelled | no_show
    join_link = Column(String(512), nullable=False)
    closed_by = Column(String(64), nullable=True)  # party or operator that moved it to a terminal state
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (Index("ix_meetings_date_time", "meeting_date", "meeting_time"),)

    def counterpart_of(self, user_id: str) -> str:
        return self.party_b_id if self.party_a_id == user_id else self.party_a_id

    def to_dict(self, viewer_id: str | None = None) -> dict:
        out = {
            "id": self.id,
            "party_a_id": self.party_a_id,
            "party_b_id": self.party_b_id,
            "slot_a_id": self.slot_a_id,
            "slot_b_id": self.slot_b_id,
            "date": self.meeting_date,
            "time": self.meeting_time,
            "duration": self.duration_minutes,
            "score": self.compatibility_score,
            "reasons": self.compatibility_reasons,
            "state": self.state,
            "join_link": self.join_link,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if viewer_id is not None:
            out["counterpart_id"] = self.counterpart_of(viewer_id)
        return out
