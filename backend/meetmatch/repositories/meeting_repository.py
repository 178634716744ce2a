"""Meeting repository - database operations for committed meetings. Never commits."""
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from meetmatch.core.constants import MEETING_CANCELLED, MEETING_COMPLETED
from meetmatch.models.meeting import Meeting


class MeetingRepository:
    """Repository for meeting database operations"""

    @staticmethod
    def get(db: Session, meeting_id: str) -> Optional[Meeting]:
        return db.query(Meeting).filter(Meeting.id == meeting_id).first()

    @staticmethod
    def insert(db: Session, **fields: Any) -> Meeting:
        meeting = Meeting(**fields)
        db.add(meeting)
        db.flush()
        return meeting

    @staticmethod
    def list_for_user(db: Session, user_id: str, state: Optional[str] = None) -> list[Meeting]:
        """Meetings where the user is either party, ordered by date then time."""
        query = db.query(Meeting).filter(or_(Meeting.party_a_id == user_id, Meeting.party_b_id == user_id))
        if state:
            query = query.filter(Meeting.state == state)
        return query.order_by(Meeting.meeting_date.asc(), Meeting.meeting_time.asc()).all()

    @staticmethod
    def counterpart_ids(db: Session, user_id: str) -> set[str]:
        """Every user sharing a meeting with user_id, in any state."""
        rows = (
            db.query(Meeting.party_a_id, Meeting.party_b_id)
            .filter(or_(Meeting.party_a_id == user_id, Meeting.party_b_id == user_id))
            .all()
        )
        return {b if a == user_id else a for a, b in rows}

    @staticmethod
    def exists_between(db: Session, user_a: str, user_b: str) -> bool:
        return (
            db.query(Meeting.id)
            .filter(
                or_(
                    (Meeting.party_a_id == user_a) & (Meeting.party_b_id == user_b),
                    (Meeting.party_a_id == user_b) & (Meeting.party_b_id == user_a),
                )
            )
            .first()
            is not None
        )

    @staticmethod
    def transition_state(
        db: Session,
        meeting_id: str,
        from_state: str,
        to_state: str,
        closed_by: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> bool:
        """Conditional write on the meeting row; returns True if this caller won the transition."""
        values: dict[Any, Any] = {Meeting.state: to_state, Meeting.closed_by: closed_by}
        if to_state == MEETING_COMPLETED:
            values[Meeting.completed_at] = at
        elif to_state == MEETING_CANCELLED:
            values[Meeting.cancelled_at] = at
        updated = (
            db.query(Meeting)
            .filter(Meeting.id == meeting_id, Meeting.state == from_state)
            .update(values, synchronize_session=False)
        )
        return updated == 1
