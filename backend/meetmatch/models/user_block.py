"""Block relation owned by the friendship subsystem. Read-only here; evaluated in both directions."""
from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from meetmatch.db.base import Base


class UserBlock(Base):
    __tablename__ = "user_blocks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    blocker_id = Column(String(64), nullable=False, index=True)
    blocked_id = Column(String(64), nullable=False, index=True)
    reason = Column(String(64), nullable=True)  # e.g. ignored_after_meeting
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("blocker_id", "blocked_id", name="uq_user_blocks_pair"),)
