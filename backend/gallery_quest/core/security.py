from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from collections.abc import Mapping
from typing import Any

from gallery_quest.core.errors import ApiError, ErrorCode

JWT_HEADER = {"alg": "HS256", "typ": "JWT"}
DEFAULT_EDITOR_TOKEN_TTL_S = 3600


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    data = data.strip()
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _json_segment(value: Mapping[str, Any]) -> str:
    return _b64url_encode(json.dumps(dict(value), separators=(",", ":"), sort_keys=True).encode("utf-8"))


def _sign(secret_key: str, signing_input: str) -> bytes:
    secret_key = (secret_key or "").strip()
    if not secret_key:
        raise ValueError("SECRET_KEY is required")
    return hmac.new(secret_key.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def create_jwt(
    *,
    secret_key: str,
    subject: str,
    ttl_s: int = DEFAULT_EDITOR_TOKEN_TTL_S,
    now_s: int | None = None,
) -> str:
    now_i = int(now_s if now_s is not None else time.time())
    payload = {"sub": subject, "iat": now_i, "exp": now_i + int(ttl_s)}
    signing_input = f"{_json_segment(JWT_HEADER)}.{_json_segment(payload)}"
    return f"{signing_input}.{_b64url_encode(_sign(secret_key, signing_input))}"


def decode_jwt(token: str, *, secret_key: str, now_s: int | None = None) -> dict[str, Any]:
    parts = (token or "").strip().split(".")
    if len(parts) != 3:
        raise ValueError("Invalid token format")

    expected = _sign(secret_key, f"{parts[0]}.{parts[1]}")
    if not hmac.compare_digest(_b64url_decode(parts[2]), expected):
        raise ValueError("Invalid token signature")

    try:
        header = json.loads(_b64url_decode(parts[0]))
        payload = json.loads(_b64url_decode(parts[1]))
    except Exception as exc:
        raise ValueError("Invalid token JSON") from exc
    if header != JWT_HEADER or not isinstance(payload, dict):
        raise ValueError("Unsupported token")

    now_i = int(now_s if now_s is not None else time.time())
    try:
        exp = int(payload.get("exp"))
    except Exception as exc:
        raise ValueError("Invalid exp") from exc
    if now_i > exp:
        raise ValueError("Token expired")
    return payload


def parse_bearer_token(authorization: str | None) -> str | None:
    parts = (authorization or "").strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def require_editor(
    headers: Mapping[str, str] | None,
    *,
    secret_key: str,
    editor_username: str,
) -> dict[str, Any]:
    authorization = (headers or {}).get("Authorization") or (headers or {}).get("authorization")
    token = parse_bearer_token(authorization)
    if not token:
        raise ApiError(code=ErrorCode.UNAUTHORIZED, message="Missing editor token", status_code=401)

    try:
        claims = decode_jwt(token, secret_key=secret_key)
    except ValueError as exc:
        raise ApiError(code=ErrorCode.UNAUTHORIZED, message="Invalid editor token", status_code=401) from exc

    if str(claims.get("sub") or "") != editor_username:
        raise ApiError(code=ErrorCode.FORBIDDEN, message="Forbidden", status_code=403)
    return claims
