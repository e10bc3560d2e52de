from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from gallery_quest.api.editor.deps import get_editor_claims
from gallery_quest.core.errors import ApiError, ErrorCode
from gallery_quest.core.filter_query import TAG_CATEGORIES
from gallery_quest.core.logging import get_logger
from gallery_quest.core.request_id import get_or_create_request_id
from gallery_quest.core.slugs import slugify
from gallery_quest.db.session import create_sessionmaker, with_sqlite_busy_retry
from gallery_quest.db.tags import create_tag as db_create_tag, get_tag_by_slug

router = APIRouter()

log = get_logger(__name__)


class TagCreateRequest(BaseModel):
    category: str
    name: str = Field(min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=200)


def _duplicate_slug(category: str, slug: str) -> ApiError:
    return ApiError(
        code=ErrorCode.BAD_REQUEST,
        message="Tag slug already exists",
        status_code=400,
        details={"category": category, "slug": slug},
    )


@router.post("/tags")
async def create_tag(
    body: TagCreateRequest,
    request: Request,
    _claims: dict[str, Any] = Depends(get_editor_claims),
) -> dict[str, Any]:
    _ = _claims
    category = body.category.strip().lower()
    if category not in TAG_CATEGORIES:
        raise ApiError(
            code=ErrorCode.BAD_REQUEST,
            message="Unsupported category",
            status_code=400,
            details={"allowed": list(TAG_CATEGORIES)},
        )

    name = body.name.strip()
    slug = slugify(body.slug if body.slug is not None else name)
    if not name or not slug:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Tag name or slug is empty", status_code=400)

    Session = create_sessionmaker(request.app.state.engine)

    async def _op() -> dict[str, Any]:
        async with Session() as session:
            if await get_tag_by_slug(session, category=category, slug=slug) is not None:
                raise _duplicate_slug(category, slug)
            try:
                tag = await db_create_tag(session, category=category, name=name, slug=slug)
            except IntegrityError as exc:
                raise _duplicate_slug(category, slug) from exc
            out = {"id": int(tag.id), "category": category, "name": name, "slug": slug}
            await session.commit()
            return out

    tag_out = await with_sqlite_busy_retry(_op)
    log.info("tag_created tag_id=%s category=%s slug=%s", tag_out["id"], category, slug)

    rid = get_or_create_request_id(request)
    return {"ok": True, "tag": tag_out, "request_id": rid}
