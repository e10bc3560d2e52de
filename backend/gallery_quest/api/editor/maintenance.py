from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from gallery_quest.api.editor.deps import get_editor_claims
from gallery_quest.core.logging import get_logger
from gallery_quest.core.request_id import get_or_create_request_id

router = APIRouter()

log = get_logger(__name__)


@router.post("/maintenance/cache/purge-expired")
async def purge_expired_cache(
    request: Request,
    _claims: dict[str, Any] = Depends(get_editor_claims),
) -> dict[str, Any]:
    _ = _claims
    deleted = await request.app.state.cache.purge_expired()
    log.info("cache_purge_expired deleted=%s", deleted)

    rid = get_or_create_request_id(request)
    return {"ok": True, "deleted": int(deleted), "request_id": rid}
