from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client.exposition import CONTENT_TYPE_LATEST, generate_latest

from gallery_quest.api.editor.deps import get_editor_claims

router = APIRouter()


@router.get("/metrics")
async def metrics(_claims: dict[str, Any] = Depends(get_editor_claims)) -> Response:
    _ = _claims
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
