import threading

import pytest

from meetmatch.services import rescoring_queue
from meetmatch.services.rescoring_queue import RescoreQueue, enqueue_refresh


def test_submit_runs_task_and_returns_future():
    seen = []
    queue = RescoreQueue(lambda owner: seen.append(owner) or len(seen), max_workers=1)
    try:
        assert queue.submit("u1").result(timeout=5) == 1
        assert seen == ["u1"]
    finally:
        queue.shutdown()


def test_queued_job_for_same_owner_is_reused():
    gate = threading.Event()
    calls = []

    def task(owner):
        calls.append(owner)
        if owner == "blocker":
            gate.wait(timeout=5)
        return owner

    queue = RescoreQueue(task, max_workers=1)
    try:
        running = queue.submit("blocker")
        first = queue.submit("u1")
        second = queue.submit("u1")
        assert first is second
        assert set(queue.pending()) == {"blocker", "u1"}
        gate.set()
        assert running.result(timeout=5) == "blocker"
        assert first.result(timeout=5) == "u1"
        assert calls.count("u1") == 1
    finally:
        gate.set()
        queue.shutdown()


def test_cancel_only_affects_queued_work():
    gate = threading.Event()
    queue = RescoreQueue(lambda owner: gate.wait(timeout=5), max_workers=1)
    try:
        queue.submit("busy")
        queued = queue.submit("later")
        assert queue.cancel("later") is True
        assert queued.cancelled()
        assert queue.cancel("nobody") is False
    finally:
        gate.set()
        queue.shutdown()


def test_failures_surface_on_the_future():
    def task(owner):
        raise ValueError(f"no profile for {owner}")

    queue = RescoreQueue(task, max_workers=1)
    try:
        with pytest.raises(ValueError):
            queue.submit("u1").result(timeout=5)
    finally:
        queue.shutdown()


def test_submit_after_shutdown_raises():
    queue = RescoreQueue(lambda owner: owner, max_workers=1)
    queue.shutdown()
    with pytest.raises(RuntimeError):
        queue.submit("u1")


def test_enqueue_refresh_is_noop_when_disabled():
    assert enqueue_refresh(["u1", "u2"]) == []


def test_enqueue_refresh_dedupes_owners(monkeypatch):
    from meetmatch.config import settings

    done = []
    queue = RescoreQueue(lambda owner: done.append(owner), max_workers=1)
    monkeypatch.setattr(settings, "suggestion_refresh_enabled", True)
    monkeypatch.setattr(rescoring_queue, "get_rescore_queue", lambda: queue)
    try:
        futures = enqueue_refresh(["u1", "u2", "u1"])
        for f in futures:
            f.result(timeout=5)
        assert sorted(done) == ["u1", "u2"]
    finally:
        queue.shutdown()
