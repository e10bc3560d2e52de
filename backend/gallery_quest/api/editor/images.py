from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from gallery_quest.api.editor.deps import get_editor_claims
from gallery_quest.core.errors import ApiError, ErrorCode
from gallery_quest.core.filter_query import TAG_CATEGORIES
from gallery_quest.core.logging import get_logger
from gallery_quest.core.request_id import get_or_create_request_id
from gallery_quest.core.time import iso_utc_ms
from gallery_quest.db.galleries import gallery_ids_referencing_image
from gallery_quest.db.images import create_image as db_create_image, get_image_by_id
from gallery_quest.db.session import create_sessionmaker, with_sqlite_busy_retry
from gallery_quest.db.tags import get_tag_assignments, get_tag_ids_in_category, set_image_tags

router = APIRouter()

log = get_logger(__name__)


class ImageCreateRequest(BaseModel):
    title: str = Field(default="", max_length=500)
    alt: str = Field(default="", max_length=1000)
    file_path: str | None = Field(default=None, max_length=1000)
    width: int | None = Field(default=None, ge=1)
    height: int | None = Field(default=None, ge=1)
    card_number: str | None = Field(default=None, max_length=100)


class ImageUpdateRequest(BaseModel):
    title: str | None = Field(default=None, max_length=500)
    alt: str | None = Field(default=None, max_length=1000)
    card_number: str | None = Field(default=None, max_length=100)
    tags: dict[str, list[int]] | None = None


def _normalize_file_path(value: str | None) -> str | None:
    path = (value or "").strip().lstrip("/")
    if not path:
        return None
    if ".." in path.split("/"):
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Unsupported file_path", status_code=400)
    return path


@router.post("/images")
async def create_image(
    body: ImageCreateRequest,
    request: Request,
    _claims: dict[str, Any] = Depends(get_editor_claims),
) -> dict[str, Any]:
    _ = _claims
    file_path = _normalize_file_path(body.file_path)

    service = request.app.state.gallery_images
    Session = create_sessionmaker(request.app.state.engine)

    async def _op() -> dict[str, Any]:
        async with Session() as session:
            image = await db_create_image(
                session,
                title=body.title.strip(),
                alt=body.alt.strip(),
                file_path=file_path,
                width=body.width,
                height=body.height,
                card_number=(body.card_number or "").strip() or None,
            )
            out = service.format_image(image, None)
            await session.commit()
            return out

    image_out = await with_sqlite_busy_retry(_op)
    log.info("image_created image_id=%s", image_out["id"])

    rid = get_or_create_request_id(request)
    return {"ok": True, "image": image_out, "request_id": rid}


@router.patch("/images/{image_id}")
async def update_image(
    image_id: int,
    body: ImageUpdateRequest,
    request: Request,
    _claims: dict[str, Any] = Depends(get_editor_claims),
) -> dict[str, Any]:
    _ = _claims
    if image_id <= 0:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Invalid image id", status_code=400)

    tags = body.tags or {}
    unknown = sorted(set(tags) - set(TAG_CATEGORIES))
    if unknown:
        raise ApiError(
            code=ErrorCode.BAD_REQUEST,
            message="Unsupported tag category",
            status_code=400,
            details={"categories": unknown},
        )

    service = request.app.state.gallery_images
    invalidation = request.app.state.invalidation
    Session = create_sessionmaker(request.app.state.engine)

    async def _op() -> tuple[dict[str, Any], list[int]]:
        async with Session() as session:
            image = await get_image_by_id(session, image_id=image_id)
            if image is None:
                raise ApiError(code=ErrorCode.NOT_FOUND, message="Image not found", status_code=404)

            for category, tag_ids in tags.items():
                wanted = {int(t) for t in tag_ids}
                found = await get_tag_ids_in_category(session, category=category, tag_ids=wanted)
                if found != wanted:
                    raise ApiError(
                        code=ErrorCode.BAD_REQUEST,
                        message="Unknown tag id",
                        status_code=400,
                        details={"category": category, "tag_ids": sorted(wanted - found)},
                    )
                await set_image_tags(session, image_id=image_id, category=category, tag_ids=wanted)

            if body.title is not None:
                image.title = body.title.strip()
            if body.alt is not None:
                image.alt = body.alt.strip()
            if body.card_number is not None:
                image.card_number = body.card_number.strip() or None
            image.updated_at = iso_utc_ms()
            await session.flush()

            assignments = await get_tag_assignments(session, image_ids=[image_id])
            out = service.format_image(image, assignments.get(image_id))
            gallery_ids = await gallery_ids_referencing_image(session, image_id=image_id)
            for gallery_id in gallery_ids:
                await invalidation.on_gallery_changed(gallery_id, session=session)
            await session.commit()
            return out, gallery_ids

    image_out, gallery_ids = await with_sqlite_busy_retry(_op)
    log.info("image_updated image_id=%s galleries=%s", image_id, len(gallery_ids))

    rid = get_or_create_request_id(request)
    return {"ok": True, "image": image_out, "invalidated_galleries": gallery_ids, "request_id": rid}
