"""
Request dependencies shared by routes: acting user, operator check, compatibility oracle.

Authentication lives outside this service; the gateway forwards the authenticated user id in
X-User-Id. Every engine route requires it.
"""
import hmac

from fastapi import Header, HTTPException

from meetmatch.config import settings
from meetmatch.core.constants import OPERATOR_TOKEN_HEADER, USER_ID_HEADER
from meetmatch.services.oracle import CompatibilityOracle


def acting_user(x_user_id: str | None = Header(None, alias=USER_ID_HEADER)) -> str:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail={"error": "missing_user", "detail": "X-User-Id header is required"})
    return user_id


def operator_id(x_operator_token: str | None = Header(None, alias=OPERATOR_TOKEN_HEADER)) -> str:
    expected = settings.operator_token
    if not expected or not x_operator_token or not hmac.compare_digest(x_operator_token, expected):
        raise HTTPException(status_code=403, detail={"error": "unauthorized", "detail": "Operator token required"})
    return "operator"


def get_oracle() -> CompatibilityOracle:
    from meetmatch.agents.compatibility_agent import get_default_oracle

    return get_default_oracle()
