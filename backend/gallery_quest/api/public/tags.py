from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from gallery_quest.core.errors import ApiError, ErrorCode
from gallery_quest.core.filter_query import TAG_CATEGORIES
from gallery_quest.core.request_id import get_or_create_request_id
from gallery_quest.db.session import create_sessionmaker
from gallery_quest.db.tags import list_tags as db_list_tags

router = APIRouter(prefix="/gallery-quest/v1")


@router.get("/tags")
async def list_tags(request: Request, category: str | None = None) -> Any:
    category_norm = (category or "").strip().lower()
    if category_norm not in TAG_CATEGORIES:
        raise ApiError(
            code=ErrorCode.BAD_REQUEST,
            message="Unsupported category",
            status_code=400,
            details={"allowed": list(TAG_CATEGORIES)},
        )

    engine = request.app.state.engine
    Session = create_sessionmaker(engine)
    async with Session() as session:
        items = await db_list_tags(session, category=category_norm)

    rid = get_or_create_request_id(request)
    return JSONResponse(
        status_code=200,
        content={
            "ok": True,
            "category": category_norm,
            "items": [
                {
                    "id": item.id,
                    "name": item.name,
                    "slug": item.slug,
                    "count_images": item.count_images,
                }
                for item in items
            ],
            "request_id": rid,
        },
    )
