from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from gallery_quest.api.editor.deps import get_editor_claims
from gallery_quest.core.errors import ApiError, ErrorCode, gallery_not_found
from gallery_quest.core.logging import get_logger
from gallery_quest.core.request_id import get_or_create_request_id
from gallery_quest.db.galleries import (
    create_gallery as db_create_gallery,
    delete_gallery as db_delete_gallery,
    get_gallery_by_id,
    get_image_list,
    set_image_list,
)
from gallery_quest.db.models.posts import Post
from gallery_quest.db.session import create_sessionmaker, with_sqlite_busy_retry

router = APIRouter()

log = get_logger(__name__)


class GalleryCreateRequest(BaseModel):
    title: str = Field(default="", max_length=500)
    image_ids: list[int] = Field(default_factory=list)


class GalleryImagesUpdateRequest(BaseModel):
    image_ids: list[int]


def _validate_gallery_id(gallery_id: int) -> None:
    if gallery_id <= 0:
        raise ApiError(code=ErrorCode.BAD_REQUEST, message="Invalid gallery id", status_code=400)


def _gallery_out(gallery: Post, *, image_ids: list[int] | None = None) -> dict[str, Any]:
    return {
        "id": int(gallery.id),
        "title": gallery.title or "",
        "image_ids": image_ids if image_ids is not None else get_image_list(gallery),
    }


@router.post("/galleries")
async def create_gallery(
    body: GalleryCreateRequest,
    request: Request,
    _claims: dict[str, Any] = Depends(get_editor_claims),
) -> dict[str, Any]:
    _ = _claims
    Session = create_sessionmaker(request.app.state.engine)
    invalidation = request.app.state.invalidation

    async def _op() -> tuple[dict[str, Any], int]:
        async with Session() as session:
            gallery = await db_create_gallery(session, title=body.title.strip(), image_ids=body.image_ids)
            out = _gallery_out(gallery)
            version = await invalidation.on_gallery_changed(out["id"], session=session)
            await session.commit()
            return out, version

    gallery_out, version = await with_sqlite_busy_retry(_op)
    log.info("gallery_created gallery_id=%s images=%s", gallery_out["id"], len(gallery_out["image_ids"]))

    rid = get_or_create_request_id(request)
    return {"ok": True, "gallery": gallery_out, "version": version, "request_id": rid}


@router.get("/galleries/{gallery_id}")
async def get_gallery(
    gallery_id: int,
    request: Request,
    _claims: dict[str, Any] = Depends(get_editor_claims),
) -> dict[str, Any]:
    _ = _claims
    _validate_gallery_id(gallery_id)

    Session = create_sessionmaker(request.app.state.engine)
    async with Session() as session:
        gallery = await get_gallery_by_id(session, gallery_id=gallery_id)
        if gallery is None:
            raise gallery_not_found(gallery_id)
        gallery_out = _gallery_out(gallery)

    version = await request.app.state.versions.get_or_init_version(gallery_id)
    rid = get_or_create_request_id(request)
    return {"ok": True, "gallery": gallery_out, "version": version, "request_id": rid}


@router.put("/galleries/{gallery_id}/images")
async def update_gallery_images(
    gallery_id: int,
    body: GalleryImagesUpdateRequest,
    request: Request,
    _claims: dict[str, Any] = Depends(get_editor_claims),
) -> dict[str, Any]:
    _ = _claims
    _validate_gallery_id(gallery_id)

    Session = create_sessionmaker(request.app.state.engine)
    invalidation = request.app.state.invalidation

    async def _op() -> tuple[dict[str, Any], int]:
        async with Session() as session:
            gallery = await get_gallery_by_id(session, gallery_id=gallery_id)
            if gallery is None:
                raise gallery_not_found(gallery_id)
            ids = await set_image_list(session, gallery=gallery, image_ids=body.image_ids)
            out = _gallery_out(gallery, image_ids=ids)
            version = await invalidation.on_gallery_changed(gallery_id, session=session)
            await session.commit()
            return out, version

    gallery_out, version = await with_sqlite_busy_retry(_op)
    log.info("gallery_images_updated gallery_id=%s images=%s", gallery_id, len(gallery_out["image_ids"]))

    rid = get_or_create_request_id(request)
    return {"ok": True, "gallery": gallery_out, "version": version, "request_id": rid}


@router.delete("/galleries/{gallery_id}")
async def delete_gallery(
    gallery_id: int,
    request: Request,
    _claims: dict[str, Any] = Depends(get_editor_claims),
) -> dict[str, Any]:
    _ = _claims
    _validate_gallery_id(gallery_id)

    Session = create_sessionmaker(request.app.state.engine)
    invalidation = request.app.state.invalidation

    async def _op() -> int:
        async with Session() as session:
            gallery = await get_gallery_by_id(session, gallery_id=gallery_id)
            if gallery is None:
                raise gallery_not_found(gallery_id)
            await db_delete_gallery(session, gallery=gallery)
            # Post ids can be reused after a delete; the bumped counter keeps old pages unreachable.
            version = await invalidation.on_gallery_changed(gallery_id, session=session)
            await session.commit()
            return version

    version = await with_sqlite_busy_retry(_op)
    log.info("gallery_deleted gallery_id=%s", gallery_id)

    rid = get_or_create_request_id(request)
    return {"ok": True, "deleted": True, "version": version, "request_id": rid}
