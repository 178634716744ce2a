"""
Meetings API: confirm a match, cancel, complete, operator no-show, list my meetings.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from meetmatch.api.deps import acting_user, operator_id
from meetmatch.api.schemas import ConfirmMeetingRequest
from meetmatch.db.session import get_db
from meetmatch.services.meeting_lifecycle import cancel_meeting, complete_meeting, list_meetings, mark_no_show
from meetmatch.services.rescoring_queue import enqueue_refresh
from meetmatch.services.scheduling_service import confirm_meeting

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("")
def confirm(
    body: ConfirmMeetingRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
) -> dict[str, Any]:
    """
    Commit a match: both slots must still be open. On 409 slot_no_longer_available, re-run
    matching; the server never picks a different counterpart on its own.
    """
    meeting = confirm_meeting(
        db,
        user_id,
        own_slot_id=body.own_slot_id,
        candidate_slot_id=body.candidate_slot_id,
        score=body.score,
        reasons=body.reasons,
    )
    enqueue_refresh([meeting.party_a_id, meeting.party_b_id])
    return {"meeting": meeting.to_dict(viewer_id=user_id)}


@router.post("/{meeting_id}/cancel")
def cancel(
    meeting_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
) -> dict[str, Any]:
    """Cancel a scheduled meeting; both slots reopen for matching."""
    meeting = cancel_meeting(db, meeting_id, user_id)
    enqueue_refresh([meeting.party_a_id, meeting.party_b_id])
    return {"meeting": meeting.to_dict(viewer_id=user_id)}


@router.post("/{meeting_id}/complete")
def complete(
    meeting_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
) -> dict[str, Any]:
    meeting = complete_meeting(db, meeting_id, user_id)
    return {"meeting": meeting.to_dict(viewer_id=user_id)}


@router.post("/{meeting_id}/no-show")
def no_show(
    meeting_id: str,
    db: Session = Depends(get_db),
    operator: str = Depends(operator_id),
) -> dict[str, Any]:
    """Operator path only (X-Operator-Token)."""
    meeting = mark_no_show(db, meeting_id, operator)
    return {"meeting": meeting.to_dict()}


@router.get("")
def list_mine(
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
    status: str | None = Query(None),
) -> dict[str, Any]:
    meetings = list_meetings(db, user_id, status=status)
    return {"meetings": [m.to_dict(viewer_id=user_id) for m in meetings]}
