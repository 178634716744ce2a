"""
Read-only facts owned by other subsystems (block relation, meeting history, profiles).

Each has a small Protocol so tests or other deployments can substitute their own source, and a
SQL implementation bound to one session. None of these ever write.
"""
from dataclasses import dataclass
from typing import Iterable, Protocol

from sqlalchemy import or_
from sqlalchemy.orm import Session

from meetmatch.models.user_block import UserBlock
from meetmatch.models.user_profile import UserProfile
from meetmatch.repositories.meeting_repository import MeetingRepository


class BlockDirectory(Protocol):
    def is_blocked(self, user_a: str, user_b: str) -> bool:
        """Symmetric: True if either user blocked the other."""
        ...

    def blocked_ids(self, user_id: str) -> set[str]:
        """Everyone in a block relation with user_id, either direction."""
        ...


class MeetingHistory(Protocol):
    def have_met_before(self, user_a: str, user_b: str) -> bool:
        ...

    def met_ids(self, user_id: str) -> set[str]:
        ...


class ProfileDirectory(Protocol):
    def user_profile(self, user_id: str) -> UserProfile | None:
        ...

    def profiles(self, user_ids: Iterable[str]) -> dict[str, UserProfile]:
        ...


class SqlBlockDirectory:
    def __init__(self, db: Session):
        self.db = db

    def is_blocked(self, user_a: str, user_b: str) -> bool:
        row = (
            self.db.query(UserBlock.id)
            .filter(
                or_(
                    (UserBlock.blocker_id == user_a) & (UserBlock.blocked_id == user_b),
                    (UserBlock.blocker_id == user_b) & (UserBlock.blocked_id == user_a),
                )
            )
            .first()
        )
        return row is not None

    def blocked_ids(self, user_id: str) -> set[str]:
        rows = (
            self.db.query(UserBlock.blocker_id, UserBlock.blocked_id)
            .filter(or_(UserBlock.blocker_id == user_id, UserBlock.blocked_id == user_id))
            .all()
        )
        return {blocked if blocker == user_id else blocker for blocker, blocked in rows}


class SqlMeetingHistory:
    """Derived from the meetings table: any meeting, any state, counts as having met."""

    def __init__(self, db: Session):
        self.db = db

    def have_met_before(self, user_a: str, user_b: str) -> bool:
        return MeetingRepository.exists_between(self.db, user_a, user_b)

    def met_ids(self, user_id: str) -> set[str]:
        return MeetingRepository.counterpart_ids(self.db, user_id)


class SqlProfileDirectory:
    def __init__(self, db: Session):
        self.db = db

    def user_profile(self, user_id: str) -> UserProfile | None:
        return self.db.query(UserProfile).filter(UserProfile.user_id == user_id).first()

    def profiles(self, user_ids: Iterable[str]) -> dict[str, UserProfile]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        rows = self.db.query(UserProfile).filter(UserProfile.user_id.in_(ids)).all()
        return {r.user_id: r for r in rows}


@dataclass
class Collaborators:
    blocks: BlockDirectory
    history: MeetingHistory
    profiles: ProfileDirectory

    @classmethod
    def from_session(cls, db: Session) -> "Collaborators":
        return cls(
            blocks=SqlBlockDirectory(db),
            history=SqlMeetingHistory(db),
            profiles=SqlProfileDirectory(db),
        )
