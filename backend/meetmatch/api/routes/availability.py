"""
Availability API: submit windows, withdraw a slot, list my slots.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from meetmatch.api.deps import acting_user
from meetmatch.api.schemas import SubmitAvailabilityRequest
from meetmatch.db.session import get_db
from meetmatch.services.availability_service import (
    list_availability,
    slots_to_dicts,
    submit_availability,
    withdraw_availability,
)
from meetmatch.services.rescoring_queue import enqueue_refresh

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("")
def submit(
    body: SubmitAvailabilityRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
) -> dict[str, Any]:
    """Store windows as open slots. The whole batch is rejected on any past or overlapping window."""
    slots = submit_availability(db, user_id, [w.model_dump() for w in body.windows])
    enqueue_refresh([user_id])
    return {"slots": slots_to_dicts(slots)}


@router.delete("/{slot_id}")
def withdraw(
    slot_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
) -> dict[str, Any]:
    """Withdraw an open slot (reserved or completed slots cannot be withdrawn)."""
    withdraw_availability(db, slot_id, user_id)
    return {"ok": True, "id": slot_id}


@router.get("")
def list_mine(
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
    date_from: str | None = Query(None),
    date_to: str | None = Query(None),
    status: str | None = Query(None),
) -> dict[str, Any]:
    slots = list_availability(db, user_id, date_from=date_from, date_to=date_to, status=status)
    return {"slots": slots_to_dicts(slots)}
