"""Request bodies for the engine API (responses are plain dicts, like the rest of the service)."""
from typing import Any

from pydantic import BaseModel, Field


class WindowIn(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM, 24h")
    duration: int = Field(..., description="Minutes; one of the allowed durations")


class SubmitAvailabilityRequest(BaseModel):
    windows: list[WindowIn] = Field(..., min_length=1, max_length=50)


class FiltersIn(BaseModel):
    same_city_required: bool = False
    stage: str | None = None


class FindMatchesRequest(BaseModel):
    windows: list[WindowIn] = Field(..., min_length=1, max_length=50)
    filters: FiltersIn | None = None


class ConfirmMeetingRequest(BaseModel):
    own_slot_id: str
    candidate_slot_id: str
    score: float | None = Field(None, ge=0, le=100)
    reasons: Any = None
