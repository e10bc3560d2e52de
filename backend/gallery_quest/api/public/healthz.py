from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from gallery_quest.core.errors import ErrorCode, error_body
from gallery_quest.core.logging import get_logger
from gallery_quest.core.request_id import get_or_create_request_id, set_request_id_header, set_request_id_on_state
from gallery_quest.db.engine import ensure_sqlite_dir

router = APIRouter()

log = get_logger(__name__)


async def _check_db(engine: AsyncEngine) -> bool:
    try:
        ensure_sqlite_dir(engine.url.render_as_string(hide_password=False))
        async with engine.connect() as conn:
            await conn.exec_driver_sql("SELECT 1")
        return True
    except Exception as exc:
        log.warning("healthz_db_unavailable err=%s", type(exc).__name__)
        return False


@router.get("/healthz")
async def healthz(request: Request) -> Any:
    rid = get_or_create_request_id(request)
    set_request_id_on_state(request, rid)

    engine: AsyncEngine | None = getattr(request.app.state, "engine", None)
    db_ok = await _check_db(engine) if engine is not None else False

    if db_ok:
        resp = JSONResponse(status_code=200, content={"ok": True, "db_ok": True, "request_id": rid})
    else:
        resp = JSONResponse(
            status_code=503,
            content=error_body(
                code=ErrorCode.API_ERROR,
                message="Database unavailable",
                request_id=rid,
                details={"db_ok": False},
            ),
        )

    set_request_id_header(resp, rid)
    return resp
