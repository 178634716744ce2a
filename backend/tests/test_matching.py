import pytest

from conftest import DAY, FakeOracle, add_block, add_slot
from meetmatch.config import settings
from meetmatch.core.errors import MalformedInput
from meetmatch.services.eligibility import find_eligible_candidates
from meetmatch.services.matching import find_best_match, find_best_matches, iter_best_matches, pick_best, score_candidates
from meetmatch.services.oracle import CompatibilityResult
from meetmatch.services.scheduling_service import confirm_meeting
from meetmatch.services.windows import Window

WINDOW = Window(DAY, "10:00", 15)


def test_highest_score_wins(db):
    add_slot(db, "low", "10:00", 15)
    best_slot = add_slot(db, "high", "10:00", 15)
    add_slot(db, "mid", "10:00", 15)
    oracle = FakeOracle({"low": 10, "high": 91.5, "mid": 60})

    best = find_best_match(db, "me", WINDOW, oracle)
    assert best.slot.id == best_slot.id
    assert best.score == 91.5
    assert best.reasons == ["fake score for high"]
    assert sorted(b for _, b in oracle.calls) == ["high", "low", "mid"]


def test_tie_keeps_first_candidate(db):
    add_slot(db, "a", "10:00", 15)
    add_slot(db, "b", "10:00", 15)
    candidates = find_eligible_candidates(db, "me", WINDOW)
    best = find_best_match(db, "me", WINDOW, FakeOracle(default=70))
    assert best.slot.id == candidates[0].id


def test_pick_best_skips_failures_and_prefers_earlier_on_tie(db):
    first = add_slot(db, "a", "10:00", 15)
    second = add_slot(db, "b", "10:00", 15)
    third = add_slot(db, "c", "10:00", 15)
    scores = [CompatibilityResult(score=40), None, CompatibilityResult(score=40)]
    assert pick_best([first, second, third], scores).slot.id == first.id
    assert pick_best([first, second], [None, None]) is None


def test_no_candidates_is_no_match(db):
    add_slot(db, "someone", "11:00", 15)
    oracle = FakeOracle()
    assert find_best_match(db, "me", WINDOW, oracle) is None
    assert oracle.calls == []


def test_failed_candidate_is_dropped_not_fatal(db):
    add_slot(db, "broken", "10:00", 15)
    ok = add_slot(db, "ok", "10:00", 15)
    oracle = FakeOracle({"broken": RuntimeError("model down"), "ok": 20})
    assert find_best_match(db, "me", WINDOW, oracle).slot.id == ok.id


def test_invalid_oracle_payload_is_a_failed_call(db):
    add_slot(db, "garbage", "10:00", 15)
    ok = add_slot(db, "ok", "10:00", 15)
    oracle = FakeOracle({"garbage": {"score": 250}, "ok": 1})
    assert find_best_match(db, "me", WINDOW, oracle).slot.id == ok.id


def test_all_scoring_failed_is_no_match(db):
    add_slot(db, "a", "10:00", 15)
    add_slot(db, "b", "10:00", 15)
    oracle = FakeOracle(default=0, scores={"a": RuntimeError("down"), "b": TimeoutError()})
    assert find_best_match(db, "me", WINDOW, oracle) is None


def test_slow_oracle_times_out_per_candidate(db, monkeypatch):
    monkeypatch.setattr(settings, "oracle_timeout_seconds", 0.2)
    add_slot(db, "slow", "10:00", 15)
    fast = add_slot(db, "fast", "10:00", 15)
    oracle = FakeOracle({"slow": 99, "fast": 10}, delays={"slow": 2.0})
    best = find_best_match(db, "me", WINDOW, oracle)
    assert best.slot.id == fast.id


def test_score_candidates_keeps_order(db):
    a = add_slot(db, "a", "10:00", 15)
    b = add_slot(db, "b", "10:00", 15)
    results = score_candidates("me", [a, b], FakeOracle({"a": 5, "b": RuntimeError()}), max_workers=1)
    assert results[0].score == 5
    assert results[1] is None
    assert score_candidates("me", [], FakeOracle()) == []


def test_batch_windows_are_independent(db):
    # One candidate can be the best match for several windows
    add_slot(db, "x", "10:00", 15)
    add_slot(db, "x", "12:00", 45)
    windows = [
        {"date": DAY, "time": "10:00", "duration": 15},
        {"date": DAY, "time": "12:00", "duration": 45},
        {"date": DAY, "time": "14:00", "duration": 5},
    ]
    results = find_best_matches(db, "me", windows, FakeOracle())
    assert [r.window.time for r in results] == ["10:00", "12:00", "14:00"]
    assert [r.match.slot.owner_id if r.match else None for r in results] == ["x", "x", None]
    assert results[2].to_dict() == {"window": {"date": DAY, "time": "14:00", "duration": 5}, "match": None}


def test_batch_validates_every_window_before_matching(db):
    oracle = FakeOracle()
    add_slot(db, "x", "10:00", 15)
    with pytest.raises(MalformedInput):
        list(iter_best_matches(db, "me", [WINDOW, {"date": DAY, "time": "25:00", "duration": 15}], oracle))
    assert oracle.calls == []


def test_blocked_candidate_is_never_scored(db):
    # V and W both open at the same time; U blocked W
    add_slot(db, "V", "10:00", 15)
    add_slot(db, "W", "10:00", 15)
    add_block(db, "U", "W")
    oracle = FakeOracle({"V": 30, "W": 95})
    best = find_best_match(db, "U", WINDOW, oracle)
    assert best.slot.owner_id == "V"
    assert ("U", "W") not in oracle.calls


def test_confirmed_match_exhausts_the_pool(db):
    v_slot = add_slot(db, "V", "10:00", 15)
    u_slot = add_slot(db, "U", "10:00", 15)
    oracle = FakeOracle({"V": 77})

    (result,) = find_best_matches(db, "U", [WINDOW], oracle)
    assert result.match.slot.id == v_slot.id
    assert result.match.score == 77

    meeting = confirm_meeting(db, "U", u_slot.id, v_slot.id, score=result.match.score, reasons=result.match.reasons)
    assert meeting.state == "scheduled"
    db.refresh(u_slot)
    db.refresh(v_slot)
    assert u_slot.state == v_slot.state == "reserved"

    (later,) = find_best_matches(db, "W", [WINDOW], oracle)
    assert later.match is None


def test_hung_call_does_not_starve_later_candidates(db):
    hung = add_slot(db, "hung", "10:00", 15)
    healthy = add_slot(db, "healthy", "10:00", 15)
    oracle = FakeOracle({"hung": 99, "healthy": 70}, delays={"hung": 1.5})

    results = score_candidates("me", [hung, healthy], oracle, timeout_seconds=0.3, max_workers=1)

    assert results[0] is None
    assert results[1].score == 70
    assert ("me", "healthy") in oracle.calls
