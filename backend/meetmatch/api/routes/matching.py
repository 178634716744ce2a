"""
Matching API: best match per window, and stored background suggestions.

"No match" is a normal outcome (match: null), distinct from an error response.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from meetmatch.api.deps import acting_user, get_oracle
from meetmatch.api.schemas import FindMatchesRequest
from meetmatch.db.session import get_db
from meetmatch.services.eligibility import MatchFilters, build_predicate
from meetmatch.services.matching import find_best_matches
from meetmatch.services.oracle import CompatibilityOracle
from meetmatch.services.suggestion_service import get_suggestions

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/best")
def best_matches(
    body: FindMatchesRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
    oracle: CompatibilityOracle = Depends(get_oracle),
) -> dict[str, Any]:
    """Find the best counterpart for each window independently. Windows need not be submitted first."""
    predicate = None
    if body.filters is not None:
        predicate = build_predicate(MatchFilters(**body.filters.model_dump()))
    results = find_best_matches(db, user_id, [w.model_dump() for w in body.windows], oracle, predicate)
    return {
        "results": [r.to_dict() for r in results],
        "matched_count": sum(1 for r in results if r.match is not None),
    }


@router.get("/suggestions")
def suggestions(
    db: Session = Depends(get_db),
    user_id: str = Depends(acting_user),
) -> dict[str, Any]:
    """Background-computed suggestions for my open slots (only those still confirmable)."""
    return {"suggestions": get_suggestions(db, user_id)}
