from __future__ import annotations

import hmac
from typing import Any

from fastapi import APIRouter, Request

from gallery_quest.core.errors import ApiError, ErrorCode
from gallery_quest.core.logging import get_logger
from gallery_quest.core.request_id import get_or_create_request_id
from gallery_quest.core.security import DEFAULT_EDITOR_TOKEN_TTL_S, create_jwt

router = APIRouter()

log = get_logger(__name__)


async def _load_login_json(request: Request) -> tuple[str, str]:
    try:
        data = await request.json()
    except Exception as exc:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Invalid JSON body", status_code=400) from exc

    if not isinstance(data, dict):
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Invalid JSON body", status_code=400)

    username = str(data.get("username") or "").strip()
    password = str(data.get("password") or "")
    if not username or not password:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Missing credentials", status_code=400)

    return username, password


@router.post("/login")
async def login(request: Request) -> dict[str, Any]:
    username, password = await _load_login_json(request)
    settings = request.app.state.settings

    if username != settings.editor_username or not hmac.compare_digest(
        password.encode("utf-8"), settings.editor_password.encode("utf-8")
    ):
        log.info("editor_login_failed username=%s", username)
        raise ApiError(code=ErrorCode.UNAUTHORIZED, message="Invalid credentials", status_code=401)

    token = create_jwt(
        secret_key=settings.secret_key,
        subject=settings.editor_username,
        ttl_s=DEFAULT_EDITOR_TOKEN_TTL_S,
    )
    rid = get_or_create_request_id(request)
    return {"ok": True, "token": token, "expires_in": DEFAULT_EDITOR_TOKEN_TTL_S, "request_id": rid}
