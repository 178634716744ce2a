"""
Best-match selection per window, and batch matching over several windows.

For one window: eligible candidates are scored by the compatibility oracle in parallel (one call
per candidate, bounded by ORACLE_TIMEOUT_SECONDS). Failed or timed-out calls drop that candidate
only. Highest score wins; ties keep the candidate seen first. No candidates, or every call
failed, is "no match" (None), which callers must treat differently from an error.

Windows in a batch are matched independently: the same candidate may be the best match for
several windows. Conflicts are resolved only when a match is confirmed.
"""
import logging
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from sqlalchemy.orm import Session

from meetmatch.config import settings
from meetmatch.core.errors import OracleUnavailable
from meetmatch.models.availability_slot import AvailabilitySlot
from meetmatch.services.collaborators import Collaborators
from meetmatch.services.eligibility import ProfilePredicate, find_eligible_candidates
from meetmatch.services.oracle import CompatibilityOracle, CompatibilityResult, coerce_result
from meetmatch.services.windows import Window, parse_window

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    slot: AvailabilitySlot
    score: float
    reasons: Any

    def to_dict(self) -> dict[str, Any]:
        return {"slot": self.slot.to_dict(), "score": self.score, "reasons": self.reasons}


@dataclass
class WindowMatch:
    window: Window
    match: MatchResult | None

    def to_dict(self) -> dict[str, Any]:
        return {"window": self.window.to_dict(), "match": self.match.to_dict() if self.match else None}


def score_candidates(
    requester_id: str,
    candidates: list[AvailabilitySlot],
    oracle: CompatibilityOracle,
    timeout_seconds: float | None = None,
    max_workers: int | None = None,
) -> list[CompatibilityResult | None]:
    """
    Score every candidate against the requester. Returns one entry per candidate, same order;
    None where the oracle raised, returned garbage, or did not answer within timeout_seconds
    of that call starting.

    At most max_workers calls are in flight. A timed-out call is abandoned (its thread finishes
    in the background) and its place goes to the next candidate, so a hung call never holds
    up the others.
    """
    if not candidates:
        return []
    timeout_seconds = settings.oracle_timeout_seconds if timeout_seconds is None else timeout_seconds
    workers = max(1, min(len(candidates), max_workers or settings.oracle_max_workers))

    results: list[CompatibilityResult | None] = [None] * len(candidates)
    waiting = deque(range(len(candidates)))
    in_flight: dict[Future, tuple[int, float]] = {}
    # One thread per candidate at most: abandoned calls keep theirs, live calls stay within `workers`
    executor = ThreadPoolExecutor(max_workers=len(candidates), thread_name_prefix="oracle")
    try:
        while waiting or in_flight:
            while waiting and len(in_flight) < workers:
                index = waiting.popleft()
                future = executor.submit(oracle.score_compatibility, requester_id, candidates[index].owner_id)
                in_flight[future] = (index, time.monotonic())

            next_deadline = min(started for _, started in in_flight.values()) + timeout_seconds
            wait(list(in_flight), timeout=max(0.0, next_deadline - time.monotonic()), return_when=FIRST_COMPLETED)

            now = time.monotonic()
            for future, (index, started) in list(in_flight.items()):
                owner_id = candidates[index].owner_id
                if future.done():
                    del in_flight[future]
                    try:
                        results[index] = coerce_result(future.result())
                    except Exception as e:
                        logger.warning("Oracle failed scoring %s vs %s: %s", requester_id, owner_id, e)
                elif now - started >= timeout_seconds:
                    del in_flight[future]
                    future.cancel()
                    logger.warning("Oracle timed out scoring %s vs %s after %ss", requester_id, owner_id, timeout_seconds)
        return results
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def pick_best(candidates: list[AvailabilitySlot], scores: list[CompatibilityResult | None]) -> MatchResult | None:
    """Highest score wins; on a tie the earlier candidate is kept."""
    best: MatchResult | None = None
    for candidate, result in zip(candidates, scores):
        if result is None:
            continue
        if best is None or result.score > best.score:
            best = MatchResult(slot=candidate, score=result.score, reasons=result.reasons)
    return best


def find_best_match(
    db: Session,
    requester_id: str,
    window: Window | dict,
    oracle: CompatibilityOracle,
    predicate: ProfilePredicate | None = None,
    collaborators: Collaborators | None = None,
) -> MatchResult | None:
    """Best eligible match for one window, or None when nobody is available or scoring failed for all."""
    window = parse_window(window)
    candidates = find_eligible_candidates(db, requester_id, window, predicate, collaborators)
    if not candidates:
        logger.info("No eligible candidates for %s at %s", requester_id, window.triple)
        return None

    scores = score_candidates(requester_id, candidates, oracle)
    best = pick_best(candidates, scores)
    if best is None:
        err = OracleUnavailable(
            f"Scoring failed for all {len(candidates)} candidates",
            requester_id=requester_id,
            window=window.to_dict(),
        )
        logger.warning("%s: %s %s", err.code, err.message, err.details)
        return None
    logger.info(
        "Best match for %s at %s: slot %s (owner %s) score=%s of %s candidates",
        requester_id,
        window.triple,
        best.slot.id,
        best.slot.owner_id,
        best.score,
        len(candidates),
    )
    return best


def iter_best_matches(
    db: Session,
    requester_id: str,
    windows: Iterable[Window | dict],
    oracle: CompatibilityOracle,
    predicate: ProfilePredicate | None = None,
    collaborators: Collaborators | None = None,
) -> Iterator[WindowMatch]:
    """
    Yield one complete WindowMatch per window, in order. All windows are validated before any
    matching starts. A caller may stop iterating at any point and keeps only finished windows.
    """
    parsed = [parse_window(w) for w in windows]
    collaborators = collaborators or Collaborators.from_session(db)
    for window in parsed:
        yield WindowMatch(
            window=window,
            match=find_best_match(db, requester_id, window, oracle, predicate, collaborators),
        )


def find_best_matches(
    db: Session,
    requester_id: str,
    windows: Iterable[Window | dict],
    oracle: CompatibilityOracle,
    predicate: ProfilePredicate | None = None,
    collaborators: Collaborators | None = None,
) -> list[WindowMatch]:
    return list(iter_best_matches(db, requester_id, windows, oracle, predicate, collaborators))
