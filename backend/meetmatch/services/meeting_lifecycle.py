"""
Meeting lifecycle: scheduled -> completed | cancelled | no_show, with the matching slot changes.

- cancel (either party): both slots go back to open so they can be matched again.
- complete (either party): both slots become completed; the pair stays in "already met" history.
- no_show (operator only): both slots become completed.
Terminal states accept nothing further (InvalidTransition). The meeting row change is itself a
conditional write, and it commits together with both slot changes or not at all.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from meetmatch.core.constants import (
    MEETING_CANCELLED,
    MEETING_COMPLETED,
    MEETING_NO_SHOW,
    MEETING_SCHEDULED,
    MEETING_STATES,
    MEETING_TERMINAL_STATES,
    SLOT_COMPLETED,
    SLOT_OPEN,
    SLOT_RESERVED,
)
from meetmatch.core.errors import InvalidState, InvalidTransition, MalformedInput, NotFound, Unauthorized
from meetmatch.models.meeting import Meeting
from meetmatch.repositories.meeting_repository import MeetingRepository
from meetmatch.repositories.slot_repository import SlotRepository

logger = logging.getLogger(__name__)

# meeting target state -> slot target state
_SLOT_STATE_FOR = {
    MEETING_CANCELLED: SLOT_OPEN,
    MEETING_COMPLETED: SLOT_COMPLETED,
    MEETING_NO_SHOW: SLOT_COMPLETED,
}


def get_meeting(db: Session, meeting_id: str) -> Meeting:
    meeting = MeetingRepository.get(db, meeting_id)
    if meeting is None:
        raise NotFound(f"Meeting {meeting_id} not found", meeting_id=meeting_id)
    return meeting


def get_meeting_for_party(db: Session, meeting_id: str, user_id: str) -> Meeting:
    meeting = get_meeting(db, meeting_id)
    if user_id not in (meeting.party_a_id, meeting.party_b_id):
        raise Unauthorized("Only the two parties can act on this meeting", meeting_id=meeting_id)
    return meeting


def _close(db: Session, meeting: Meeting, to_state: str, acting_id: str) -> Meeting:
    if meeting.state in MEETING_TERMINAL_STATES:
        raise InvalidTransition(
            f"Meeting is already {meeting.state}",
            meeting_id=meeting.id,
            state=meeting.state,
            requested=to_state,
        )
    meeting_id = meeting.id
    slot_ids = (meeting.slot_a_id, meeting.slot_b_id)
    slot_state = _SLOT_STATE_FOR[to_state]
    try:
        if not MeetingRepository.transition_state(
            db,
            meeting_id,
            MEETING_SCHEDULED,
            to_state,
            closed_by=acting_id,
            at=datetime.now(timezone.utc),
        ):
            raise InvalidTransition("Meeting was closed concurrently", meeting_id=meeting_id, requested=to_state)
        for slot_id in slot_ids:
            if not SlotRepository.transition_state(db, slot_id, SLOT_RESERVED, slot_state):
                raise InvalidState(
                    f"Slot {slot_id} of meeting {meeting_id} is not reserved",
                    meeting_id=meeting_id,
                    slot_id=slot_id,
                )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(meeting)
    logger.info("Meeting %s -> %s by %s; slots %s -> %s", meeting_id, to_state, acting_id, slot_ids, slot_state)
    return meeting


def cancel_meeting(db: Session, meeting_id: str, acting_user: str) -> Meeting:
    meeting = get_meeting_for_party(db, meeting_id, acting_user)
    return _close(db, meeting, MEETING_CANCELLED, acting_user)


def complete_meeting(db: Session, meeting_id: str, acting_user: str) -> Meeting:
    meeting = get_meeting_for_party(db, meeting_id, acting_user)
    return _close(db, meeting, MEETING_COMPLETED, acting_user)


def mark_no_show(db: Session, meeting_id: str, operator_id: str) -> Meeting:
    """Operator/administrative path; authorization is the caller's job (see the no-show route)."""
    meeting = get_meeting(db, meeting_id)
    return _close(db, meeting, MEETING_NO_SHOW, operator_id)


def list_meetings(db: Session, user_id: str, status: str | None = None) -> list[Meeting]:
    if status and status not in MEETING_STATES:
        raise MalformedInput(f"Unknown meeting status {status!r}. Use one of {list(MEETING_STATES)}.", field="status")
    return MeetingRepository.list_for_user(db, user_id, state=status)
