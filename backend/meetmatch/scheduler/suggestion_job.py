"""
Periodic suggestion refresh: every SUGGESTION_REFRESH_MINUTES, enqueue a re-score for each owner
holding open future slots. The tick itself only reads owner ids; scoring runs in the rescoring
queue so a slow oracle never stalls the scheduler thread.
"""
import logging

from meetmatch.db.session import SessionLocal
from meetmatch.services.rescoring_queue import enqueue_refresh
from meetmatch.services.suggestion_service import owners_due_for_refresh

logger = logging.getLogger(__name__)


def run_suggestion_refresh_job() -> int:
    """One tick. Returns how many owners were enqueued."""
    db = SessionLocal()
    try:
        owners = owners_due_for_refresh(db)
    except Exception as e:
        logger.exception("Suggestion refresh tick failed: %s", e)
        return 0
    finally:
        db.close()
    if not owners:
        logger.debug("Suggestion refresh: no owners with open slots")
        return 0
    futures = enqueue_refresh(owners)
    logger.info("Suggestion refresh: enqueued %s of %s owners", len(futures), len(owners))
    return len(futures)
