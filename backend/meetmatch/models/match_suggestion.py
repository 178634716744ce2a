"""Latest background-computed best match for one open slot. Advisory only; confirming re-validates everything."""
from sqlalchemy import JSON, Column, DateTime, Float, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from meetmatch.db.base import Base


class MatchSuggestion(Base):
    __tablename__ = "match_suggestions"

    slot_id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    candidate_slot_id = Column(String(36), nullable=False)
    candidate_owner_id = Column(String(64), nullable=False)
    score = Column(Float, nullable=False)
    reasons = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    computed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
