"""
Shared fixtures: a file-backed SQLite database per test, a fixed clock, and a deterministic
compatibility oracle. Background suggestion refresh is off unless a test turns it on.
"""
import threading
import time
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import meetmatch.models  # noqa: F401  registers tables
from meetmatch.config import settings
from meetmatch.db.base import Base
from meetmatch.db.session import make_engine
from meetmatch.models import AvailabilitySlot, UserBlock, UserProfile
from meetmatch.repositories.slot_repository import SlotRepository
from meetmatch.services.oracle import CompatibilityResult

DAY = "2030-03-04"
NOW = datetime(2030, 3, 4, 8, 0, tzinfo=ZoneInfo("UTC"))


class FakeOracle:
    """
    Scores by candidate (user_b). A score entry may be a number, an Exception (raised), or a
    {score, reasons} dict. `delays` sleeps before answering. Unknown users score `default`.
    """

    def __init__(self, scores=None, default=50.0, delays=None):
        self.scores = dict(scores or {})
        self.default = default
        self.delays = dict(delays or {})
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def score_compatibility(self, user_a, user_b):
        with self._lock:
            self.calls.append((user_a, user_b))
        if user_b in self.delays:
            time.sleep(self.delays[user_b])
        value = self.scores.get(user_b, self.default)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, dict):
            return value
        return CompatibilityResult(score=value, reasons=[f"fake score for {user_b}"])


@pytest.fixture(autouse=True)
def engine_settings(monkeypatch):
    monkeypatch.setattr(settings, "suggestion_refresh_enabled", False)
    monkeypatch.setattr(settings, "allowed_durations", [5, 15, 45])
    monkeypatch.setattr(settings, "calendar_timezone", "UTC")
    monkeypatch.setattr(settings, "oracle_timeout_seconds", 5.0)
    monkeypatch.setattr(settings, "operator_token", "op-secret")
    monkeypatch.setattr(settings, "meeting_link_base_url", "https://meet.example.com")


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'meetmatch_test.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def oracle():
    return FakeOracle()


def add_slot(db, owner_id, time_of_day="10:00", duration=15, slot_date=DAY, state="open") -> AvailabilitySlot:
    """Insert one slot directly (no overlap or past checks) and commit."""
    (slot,) = SlotRepository.insert_many(db, owner_id, [(slot_date, time_of_day, duration)])
    slot.state = state
    db.commit()
    db.refresh(slot)
    return slot


def add_block(db, blocker_id, blocked_id, reason=None) -> None:
    db.add(UserBlock(blocker_id=blocker_id, blocked_id=blocked_id, reason=reason))
    db.commit()


def add_profile(db, user_id, city=None, stage=None, summary=None, display_name=None) -> UserProfile:
    profile = UserProfile(user_id=user_id, city=city, stage=stage, summary=summary, display_name=display_name)
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def client(session_factory, oracle):
    from meetmatch.api.deps import get_oracle
    from meetmatch.db.session import get_db
    from meetmatch.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_oracle] = lambda: oracle
    yield TestClient(app)
    app.dependency_overrides.clear()
