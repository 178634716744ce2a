"""
Scheduling transaction: turn two open slots into one scheduled meeting.

All-or-nothing. Both slots are re-validated at commit time (matching results may be stale),
then the meeting insert and both open -> reserved flips run in one session transaction, in a
fixed order (meeting, requester slot, candidate slot). Each flip is a conditional UPDATE; if
either changes no row another commit won the slot, everything is rolled back and the caller
gets SlotNoLongerAvailable. The engine never retries on the caller's behalf.
"""
import logging
import uuid
from typing import Any

from sqlalchemy.orm import Session

from meetmatch.config import settings
from meetmatch.core.constants import MEETING_SCHEDULED, SLOT_OPEN, SLOT_RESERVED
from meetmatch.core.errors import InvalidState, MalformedInput, SlotNoLongerAvailable, Unauthorized
from meetmatch.models.meeting import Meeting
from meetmatch.repositories.meeting_repository import MeetingRepository
from meetmatch.repositories.slot_repository import SlotRepository
from meetmatch.services.collaborators import Collaborators

logger = logging.getLogger(__name__)


def new_join_link() -> str:
    return f"{settings.meeting_link_base_url}/meeting/{uuid.uuid4()}"


def _validate_score(score: float | None) -> float | None:
    if score is None:
        return None
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 100:
        raise MalformedInput(f"Compatibility score must be between 0 and 100, got {score!r}", field="score")
    return float(score)


def confirm_meeting(
    db: Session,
    owner_id: str,
    own_slot_id: str,
    candidate_slot_id: str,
    score: float | None = None,
    reasons: Any = None,
    collaborators: Collaborators | None = None,
) -> Meeting:
    """
    Commit a meeting between owner_id (holding own_slot_id) and the owner of candidate_slot_id.
    Raises SlotNoLongerAvailable if either slot is gone or not open; nothing is written in that case.
    """
    score = _validate_score(score)
    slots = SlotRepository.get_many(db, [own_slot_id, candidate_slot_id])
    own = slots.get(own_slot_id)
    candidate = slots.get(candidate_slot_id)
    if own is None or candidate is None:
        missing = own_slot_id if own is None else candidate_slot_id
        raise SlotNoLongerAvailable(f"Slot {missing} no longer exists", slot_id=missing)
    if own.owner_id != owner_id:
        raise Unauthorized("Requester does not own the slot being confirmed", slot_id=own_slot_id)
    if candidate.owner_id == owner_id:
        raise MalformedInput("Cannot schedule a meeting with yourself", slot_id=candidate_slot_id)
    if (own.slot_date, own.time_of_day, own.duration_minutes) != (
        candidate.slot_date,
        candidate.time_of_day,
        candidate.duration_minutes,
    ):
        raise MalformedInput(
            "Slots do not share the same date, time and duration",
            own_slot_id=own_slot_id,
            candidate_slot_id=candidate_slot_id,
        )
    for slot in (own, candidate):
        if slot.state != SLOT_OPEN:
            raise SlotNoLongerAvailable(f"Slot {slot.id} is {slot.state}", slot_id=slot.id, state=slot.state)

    # Eligibility can change between matching and confirmation (a block, or a meeting with someone else's slot)
    collaborators = collaborators or Collaborators.from_session(db)
    if collaborators.blocks.is_blocked(owner_id, candidate.owner_id):
        raise InvalidState("Counterpart is no longer eligible (blocked)", counterpart_id=candidate.owner_id)
    if collaborators.history.have_met_before(owner_id, candidate.owner_id):
        raise InvalidState("Counterpart is no longer eligible (already met)", counterpart_id=candidate.owner_id)

    counterpart_id = candidate.owner_id
    try:
        meeting = MeetingRepository.insert(
            db,
            party_a_id=owner_id,
            party_b_id=counterpart_id,
            slot_a_id=own.id,
            slot_b_id=candidate.id,
            meeting_date=own.slot_date,
            meeting_time=own.time_of_day,
            duration_minutes=own.duration_minutes,
            compatibility_score=score,
            compatibility_reasons=reasons,
            state=MEETING_SCHEDULED,
            join_link=new_join_link(),
        )
        for slot_id in (own_slot_id, candidate_slot_id):
            if not SlotRepository.transition_state(db, slot_id, SLOT_OPEN, SLOT_RESERVED):
                raise SlotNoLongerAvailable(f"Slot {slot_id} was taken by another commit", slot_id=slot_id)
        db.commit()
    except Exception as e:
        db.rollback()
        if isinstance(e, SlotNoLongerAvailable):
            logger.info("Commit lost race for %s: %s", owner_id, e.message)
        else:
            logger.exception("Scheduling transaction failed for %s", owner_id)
        raise

    db.refresh(meeting)
    logger.info(
        "Scheduled meeting %s: %s + %s at %s %s (%sm), score=%s",
        meeting.id,
        owner_id,
        counterpart_id,
        meeting.meeting_date,
        meeting.meeting_time,
        meeting.duration_minutes,
        score,
    )
    return meeting
