"""Compatibility agent: scores two users 0-100 with reasons. Instructions loaded from compatibility_agent_instructions.md."""
import logging
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Callable

from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings
from sqlalchemy.orm import Session

from meetmatch.config import settings
from meetmatch.core.errors import NotFound
from meetmatch.db.session import SessionLocal
from meetmatch.models.user_profile import UserProfile
from meetmatch.services.collaborators import SqlProfileDirectory
from meetmatch.services.oracle import CompatibilityResult

logger = logging.getLogger(__name__)

_INSTRUCTIONS_PATH = Path(__file__).resolve().parent / "compatibility_agent_instructions.md"


def _instructions() -> str:
    return _INSTRUCTIONS_PATH.read_text().strip().replace("{{current_date}}", date.today().isoformat())


@lru_cache(maxsize=1)
def get_agent() -> Agent:
    """Built on first use so importing this module never needs model credentials."""
    return Agent(
        model=settings.ai_model,
        output_type=CompatibilityResult,
        instructions=_instructions(),
        retries=1,
        model_settings=ModelSettings(max_tokens=1024, temperature=0.2),
    )


def _describe(label: str, profile: UserProfile) -> str:
    return "\n".join([
        f"{label}",
        f"- name: {profile.display_name or 'unknown'}",
        f"- city: {profile.city or 'unknown'}",
        f"- stage: {profile.stage or 'unknown'}",
        f"- summary: {(profile.summary or '').strip() or 'none'}",
    ])


def build_prompt(profile_a: UserProfile, profile_b: UserProfile) -> str:
    return f"{_describe('PERSON A', profile_a)}\n\n{_describe('PERSON B', profile_b)}"


class AgentCompatibilityOracle:
    """
    Oracle backed by the compatibility agent. Safe to call from worker threads: each call opens
    its own DB session to read the two profiles and closes it before calling the model.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal, agent: Agent | None = None):
        self.session_factory = session_factory
        self._agent = agent

    @property
    def agent(self) -> Agent:
        return self._agent or get_agent()

    def score_compatibility(self, user_a: str, user_b: str) -> CompatibilityResult:
        db = self.session_factory()
        try:
            profiles = SqlProfileDirectory(db).profiles([user_a, user_b])
            profile_a, profile_b = profiles.get(user_a), profiles.get(user_b)
            if profile_a is None or profile_b is None:
                missing = user_a if profile_a is None else user_b
                raise NotFound(f"Profile not found for user {missing}", user_id=missing)
            prompt = build_prompt(profile_a, profile_b)
        finally:
            db.close()
        result = self.agent.run_sync(prompt)
        logger.debug("Compatibility %s vs %s: %s", user_a, user_b, result.output.score)
        return result.output


@lru_cache(maxsize=1)
def get_default_oracle() -> AgentCompatibilityOracle:
    return AgentCompatibilityOracle()
