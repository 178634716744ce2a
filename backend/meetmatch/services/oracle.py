"""Compatibility oracle contract. The engine treats scoring as an opaque, fallible call."""
from typing import Any, Protocol

from pydantic import BaseModel, Field, ValidationError

from meetmatch.core.errors import MalformedInput


class CompatibilityResult(BaseModel):
    """Score 0-100 plus an opaque reasons payload stored on the meeting for display/audit."""

    score: float = Field(..., ge=0, le=100)
    reasons: Any = Field(default_factory=list)


class CompatibilityOracle(Protocol):
    """Scores one user against another. May raise or hang; callers bound it with a timeout."""

    def score_compatibility(self, user_a: str, user_b: str) -> CompatibilityResult:
        ...


def coerce_result(raw: Any) -> CompatibilityResult:
    """Accept a CompatibilityResult or a {score, reasons} mapping; anything else is a failed call."""
    if isinstance(raw, CompatibilityResult):
        return raw
    try:
        return CompatibilityResult.model_validate(raw)
    except ValidationError as e:
        raise MalformedInput(f"Oracle returned an invalid result: {e.errors()[0].get('msg')}") from e
