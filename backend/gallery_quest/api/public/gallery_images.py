from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from gallery_quest.core.errors import ApiError, ErrorCode
from gallery_quest.core.filter_query import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    MAX_PER_PAGE,
    CombinationMode,
    FilterQuery,
    parse_slug_list,
)
from gallery_quest.core.metrics import observe_gallery_images_result
from gallery_quest.core.request_id import get_or_create_request_id, set_request_id_header

router = APIRouter(prefix="/gallery-quest/v1")


def _result_label(exc: ApiError | None) -> str:
    if exc is None:
        return "ok"
    if exc.status_code == 404:
        return "not_found"
    if exc.status_code == 400:
        return "bad_request"
    return "error"


def build_filter_query(
    *,
    gallery_id: int,
    character: str | None,
    artist: str | None,
    rarity: str | None,
    filter_logic: str | None,
    page: int,
    per_page: int,
) -> FilterQuery:
    if gallery_id <= 0:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Unsupported gallery id", status_code=400)
    if page < 1:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Unsupported page", status_code=400)
    if per_page < 1 or per_page > MAX_PER_PAGE:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Unsupported per_page", status_code=400)
    try:
        mode = CombinationMode.from_filter_logic(filter_logic)
    except ValueError as exc:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Unsupported filterLogic", status_code=400) from exc

    return FilterQuery(
        gallery_id=int(gallery_id),
        tags={
            "character": parse_slug_list(character),
            "artist": parse_slug_list(artist),
            "rarity": parse_slug_list(rarity),
        },
        mode=mode,
        page=int(page),
        per_page=int(per_page),
    )


@router.get("/images/{gallery_id}")
async def get_gallery_images(
    request: Request,
    gallery_id: int,
    character: str | None = None,
    artist: str | None = None,
    rarity: str | None = None,
    filterLogic: str | None = None,
    page: int = DEFAULT_PAGE,
    per_page: int = DEFAULT_PER_PAGE,
) -> Any:
    started = time.monotonic()
    failure: ApiError | None = None
    try:
        query = build_filter_query(
            gallery_id=gallery_id,
            character=character,
            artist=artist,
            rarity=rarity,
            filter_logic=filterLogic,
            page=page,
            per_page=per_page,
        )
        result = await request.app.state.gallery_images.get_images(query)
    except ApiError as exc:
        failure = exc
        raise
    finally:
        observe_gallery_images_result(result=_result_label(failure), duration_s=time.monotonic() - started)

    rid = get_or_create_request_id(request)
    resp = JSONResponse(status_code=200, content=result)
    set_request_id_header(resp, rid)
    return resp
