"""
Match suggestions: latest best match for each of a user's open, future slots.

Computed in the background (rescoring queue / periodic job) with the same batch matcher the API
uses, in its own DB session. Suggestions are advisory: confirming one still runs the full
scheduling transaction.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.orm import Session

from meetmatch.core.constants import SLOT_OPEN, SUGGESTION_REFRESH_MAX_OWNERS
from meetmatch.core.time_utils import is_past
from meetmatch.db.session import SessionLocal
from meetmatch.models.match_suggestion import MatchSuggestion
from meetmatch.repositories.slot_repository import SlotRepository
from meetmatch.services.availability_service import calendar_now
from meetmatch.services.matching import iter_best_matches
from meetmatch.services.oracle import CompatibilityOracle
from meetmatch.services.windows import Window

logger = logging.getLogger(__name__)


def _default_oracle() -> CompatibilityOracle:
    from meetmatch.agents.compatibility_agent import get_default_oracle

    return get_default_oracle()


def refresh_suggestions_for_owner(
    owner_id: str,
    oracle: CompatibilityOracle | None = None,
    session_factory: Callable[[], Session] = SessionLocal,
    now: datetime | None = None,
) -> int:
    """Recompute suggestions for the owner's open future slots. Returns how many suggestions were stored."""
    now = now or calendar_now()
    oracle = oracle or _default_oracle()
    db = session_factory()
    try:
        today = now.date().isoformat()
        open_slots = [
            s
            for s in SlotRepository.list_by_owner(db, owner_id, date_from=today, state=SLOT_OPEN)
            if not is_past(s.slot_date, s.time_of_day, now)
        ]
        open_ids = [s.id for s in open_slots]
        db.query(MatchSuggestion).filter(
            MatchSuggestion.owner_id == owner_id,
            MatchSuggestion.slot_id.not_in(open_ids),
        ).delete(synchronize_session=False)

        windows = [Window(s.slot_date, s.time_of_day, s.duration_minutes) for s in open_slots]
        stored = 0
        for slot, result in zip(open_slots, iter_best_matches(db, owner_id, windows, oracle)):
            row = db.get(MatchSuggestion, slot.id)
            if result.match is None:
                if row is not None:
                    db.delete(row)
                continue
            if row is None:
                row = MatchSuggestion(slot_id=slot.id, owner_id=owner_id)
                db.add(row)
            row.candidate_slot_id = result.match.slot.id
            row.candidate_owner_id = result.match.slot.owner_id
            row.score = result.match.score
            row.reasons = result.match.reasons
            row.computed_at = datetime.now(timezone.utc)
            stored += 1
        db.commit()
        logger.info("Refreshed suggestions for %s: %s of %s open slots matched", owner_id, stored, len(open_slots))
        return stored
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_suggestions(db: Session, owner_id: str) -> list[dict[str, Any]]:
    """Stored suggestions whose own slot and candidate slot are both still open."""
    rows = db.query(MatchSuggestion).filter(MatchSuggestion.owner_id == owner_id).all()
    if not rows:
        return []
    slots = SlotRepository.get_many(db, [r.slot_id for r in rows] + [r.candidate_slot_id for r in rows])
    out = []
    for r in rows:
        own = slots.get(r.slot_id)
        candidate = slots.get(r.candidate_slot_id)
        if own is None or candidate is None or own.state != SLOT_OPEN or candidate.state != SLOT_OPEN:
            continue
        out.append({
            "slot": own.to_dict(),
            "match": {"slot": candidate.to_dict(), "score": r.score, "reasons": r.reasons},
            "computed_at": r.computed_at.isoformat() if r.computed_at else None,
        })
    out.sort(key=lambda s: (s["slot"]["date"], s["slot"]["time"]))
    return out


def owners_due_for_refresh(db: Session, now: datetime | None = None) -> list[str]:
    today = (now or calendar_now()).date().isoformat()
    return SlotRepository.list_owners_with_open_slots(db, today, SUGGESTION_REFRESH_MAX_OWNERS)
