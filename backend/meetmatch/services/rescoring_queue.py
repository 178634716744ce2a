"""
Background re-scoring queue: recompute match suggestions without blocking the caller.

Work is handed to a small thread pool and every submission returns a Future, so callers (and
tests) can wait for completion, inspect failures, or cancel work that has not started yet.
A queued-but-not-started job for an owner is reused instead of stacking duplicates; a job that
is already running is not, since it may have read state from before the change.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterable

from meetmatch.config import settings

logger = logging.getLogger(__name__)


class RescoreQueue:
    def __init__(self, task: Callable[[str], Any], max_workers: int | None = None):
        self._task = task
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or settings.rescoring_workers,
            thread_name_prefix="rescore",
        )
        self._futures: dict[str, Future] = {}
        self._lock = threading.Lock()
        self._closed = False

    def _run(self, owner_id: str) -> Any:
        try:
            return self._task(owner_id)
        except Exception:
            logger.exception("Re-scoring for %s failed", owner_id)
            raise

    def _forget(self, owner_id: str, future: Future) -> None:
        with self._lock:
            if self._futures.get(owner_id) is future:
                del self._futures[owner_id]

    def submit(self, owner_id: str) -> Future:
        with self._lock:
            if self._closed:
                raise RuntimeError("RescoreQueue is shut down")
            existing = self._futures.get(owner_id)
            if existing is not None and not existing.done() and not existing.running():
                return existing
            future = self._executor.submit(self._run, owner_id)
            self._futures[owner_id] = future
        future.add_done_callback(lambda f, o=owner_id: self._forget(o, f))
        return future

    def submit_many(self, owner_ids: Iterable[str]) -> list[Future]:
        return [self.submit(o) for o in dict.fromkeys(owner_ids)]

    def cancel(self, owner_id: str) -> bool:
        """Cancel the owner's queued job. False if there is none or it already started."""
        with self._lock:
            future = self._futures.get(owner_id)
        return future.cancel() if future is not None else False

    def pending(self) -> list[str]:
        """Owners with a job queued or running."""
        with self._lock:
            return [o for o, f in self._futures.items() if not f.done()]

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=not wait)


_queue: RescoreQueue | None = None
_queue_lock = threading.Lock()


def get_rescore_queue() -> RescoreQueue:
    """Process-wide queue running refresh_suggestions_for_owner."""
    global _queue
    with _queue_lock:
        if _queue is None:
            from meetmatch.services.suggestion_service import refresh_suggestions_for_owner

            _queue = RescoreQueue(refresh_suggestions_for_owner)
        return _queue


def shutdown_rescore_queue(wait: bool = False) -> None:
    global _queue
    with _queue_lock:
        queue, _queue = _queue, None
    if queue is not None:
        queue.shutdown(wait=wait)


def enqueue_refresh(owner_ids: Iterable[str]) -> list[Future]:
    """Fire-and-forget from request handlers; failures are logged, never raised to the caller."""
    if not settings.suggestion_refresh_enabled:
        return []
    try:
        return get_rescore_queue().submit_many(owner_ids)
    except RuntimeError as e:
        logger.warning("Could not enqueue re-scoring for %s: %s", list(owner_ids), e)
        return []
