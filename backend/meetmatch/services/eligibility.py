"""
Eligibility filter: which open slots may be offered as a match for one window.

Candidates must match the window's (date, time, duration) exactly; overlapping-but-different
slots are never candidates. Excluded: the requester, anyone sharing any meeting with the
requester, and anyone in a block relation with the requester in either direction. An optional
profile predicate (locality, stage, or anything the caller supplies) runs last.
"""
import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

from meetmatch.models.availability_slot import AvailabilitySlot
from meetmatch.models.user_profile import UserProfile
from meetmatch.repositories.slot_repository import SlotRepository
from meetmatch.services.collaborators import Collaborators
from meetmatch.services.windows import Window, parse_window

logger = logging.getLogger(__name__)

# (candidate_profile, requester_profile) -> keep?
ProfilePredicate = Callable[[UserProfile | None, UserProfile | None], bool]


@dataclass(frozen=True)
class MatchFilters:
    same_city_required: bool = False
    stage: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.same_city_required and not (self.stage or "").strip()


def _norm(value: str | None) -> str:
    return (value or "").strip().lower()


def same_city(candidate: UserProfile | None, requester: UserProfile | None) -> bool:
    if candidate is None or requester is None:
        return False
    return bool(_norm(candidate.city)) and _norm(candidate.city) == _norm(requester.city)


def stage_is(stage: str) -> ProfilePredicate:
    wanted = _norm(stage)

    def predicate(candidate: UserProfile | None, requester: UserProfile | None) -> bool:
        return candidate is not None and _norm(candidate.stage) == wanted

    return predicate


def build_predicate(filters: MatchFilters | None) -> ProfilePredicate | None:
    """Turn caller filters into one predicate (all conditions must hold). None when nothing to filter."""
    if filters is None or filters.is_empty:
        return None
    checks: list[ProfilePredicate] = []
    if filters.same_city_required:
        checks.append(same_city)
    if (filters.stage or "").strip():
        checks.append(stage_is(filters.stage))

    def predicate(candidate: UserProfile | None, requester: UserProfile | None) -> bool:
        return all(check(candidate, requester) for check in checks)

    return predicate


def excluded_user_ids(requester_id: str, collaborators: Collaborators) -> set[str]:
    """{requester} ∪ already met (any meeting state) ∪ blocked either direction."""
    excluded = {requester_id}
    excluded |= collaborators.history.met_ids(requester_id)
    excluded |= collaborators.blocks.blocked_ids(requester_id)
    return excluded


def find_eligible_candidates(
    db: Session,
    requester_id: str,
    window: Window | dict,
    predicate: ProfilePredicate | None = None,
    collaborators: Collaborators | None = None,
) -> list[AvailabilitySlot]:
    """Open slots exactly matching the window that the requester may be matched with. Order not guaranteed."""
    window = parse_window(window)
    collaborators = collaborators or Collaborators.from_session(db)

    candidates = SlotRepository.list_open_matching(
        db, window.date, window.time, window.duration, exclude_owner_id=requester_id
    )
    if not candidates:
        return []

    excluded = excluded_user_ids(requester_id, collaborators)
    eligible = [c for c in candidates if c.owner_id not in excluded]
    logger.debug(
        "Eligibility %s %s: %s open, %s after exclusions",
        requester_id,
        window.triple,
        len(candidates),
        len(eligible),
    )

    if predicate is not None and eligible:
        requester_profile = collaborators.profiles.user_profile(requester_id)
        profiles = collaborators.profiles.profiles(c.owner_id for c in eligible)
        eligible = [c for c in eligible if predicate(profiles.get(c.owner_id), requester_profile)]
    return eligible
