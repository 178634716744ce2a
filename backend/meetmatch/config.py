"""
Application settings (Pydantic Settings).
"""
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env next to backend/ (parent of meetmatch/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    database_url: str = "sqlite:///./meetmatch.db"
    openai_api_key: str = ""  # OPENAI_API_KEY in .env
    ai_model: str = "openai:gpt-4.1-mini"
    # Canonical calendar for "is this window in the past"; one zone for every user
    calendar_timezone: str = "UTC"
    allowed_durations: list[int] = [5, 15, 45]
    # Compatibility oracle: per-call timeout and parallel calls per window
    oracle_timeout_seconds: float = 20.0
    oracle_max_workers: int = 8
    meeting_link_base_url: str = "http://localhost:5173"
    # Background suggestion refresh
    rescoring_workers: int = 2
    suggestion_refresh_enabled: bool = True
    suggestion_refresh_minutes: int = 15
    operator_token: str = ""

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("calendar_timezone", mode="after")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        v = (v or "").strip() or "UTC"
        try:
            ZoneInfo(v)
        except ZoneInfoNotFoundError as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("allowed_durations", mode="after")
    @classmethod
    def positive_durations(cls, v: list[int]) -> list[int]:
        if not v or any(d <= 0 for d in v):
            raise ValueError("allowed_durations must be a non-empty list of positive minutes")
        return sorted(set(v))

    @field_validator("meeting_link_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")


settings = Settings()
