from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from gallery_quest.core.cache import CacheStore
from gallery_quest.core.config import DEFAULT_CACHE_TTL_SECONDS
from gallery_quest.core.errors import ApiError, ErrorCode, gallery_not_found
from gallery_quest.core.filter_query import TAG_CATEGORIES, CombinationMode, FilterQuery, fingerprint
from gallery_quest.core.logging import get_logger
from gallery_quest.core.metrics import observe_cache_event
from gallery_quest.core.renditions import RenditionResolver
from gallery_quest.db.galleries import get_gallery_by_id, get_image_list
from gallery_quest.db.images import get_existing_image_ids, get_images_by_ids
from gallery_quest.db.models.images import Image
from gallery_quest.db.session import create_sessionmaker
from gallery_quest.db.tags import get_tag_assignments, image_ids_with_tags, resolve_tag_ids
from gallery_quest.db.versions import VersionStore

log = get_logger(__name__)


def empty_page() -> dict[str, Any]:
    return {"items": [], "total": 0, "pages": 0}


def combine_matches(
    gallery_ids: list[int],
    matches: list[set[int]],
    *,
    mode: CombinationMode,
) -> list[int]:
    """Filter gallery_ids by per-category match sets, keeping gallery order.

    `matches` holds one set per requested category; an empty set stands for a
    category whose slugs resolved to nothing. No sets means no filtering.
    """
    if not matches:
        return list(gallery_ids)
    if mode is CombinationMode.ALL:
        keep = set.intersection(*matches)
    else:
        keep = set().union(*matches)
    return [i for i in gallery_ids if i in keep]


@dataclass(slots=True)
class GalleryImageQueryService:
    engine: AsyncEngine
    versions: VersionStore
    cache: CacheStore
    renditions: RenditionResolver
    cache_ttl_s: float = DEFAULT_CACHE_TTL_SECONDS

    async def get_images(self, query: FilterQuery) -> dict[str, Any]:
        try:
            return await self._get_images(query)
        except ApiError:
            raise
        except Exception as exc:
            log.exception("gallery_images_failed gallery_id=%s", query.gallery_id)
            raise ApiError(
                code=ErrorCode.API_ERROR,
                message="An error occurred while retrieving images",
                status_code=500,
            ) from exc

    async def _get_images(self, query: FilterQuery) -> dict[str, Any]:
        Session = create_sessionmaker(self.engine)
        async with Session() as session:
            # Read the version before the list: writers commit both together, so a
            # save landing in between is cached under a key no reader asks for again.
            version = await self._current_version(session, query.gallery_id)

            gallery = await get_gallery_by_id(session, gallery_id=query.gallery_id)
            if gallery is None:
                raise gallery_not_found(query.gallery_id)
            image_ids = get_image_list(gallery)
            if not image_ids:
                return empty_page()

            cache_key = fingerprint(query, version=version) if version is not None else None
            if cache_key is not None:
                cached = await self._cache_get(cache_key)
                if cached is not None:
                    log.debug("gallery_images_cache_hit gallery_id=%s key=%s", query.gallery_id, cache_key)
                    return cached

            page = await self._compute(session, query, image_ids)

        if cache_key is not None:
            await self._cache_set(cache_key, page)
        return page

    async def _current_version(self, session: AsyncSession, gallery_id: int) -> int | None:
        try:
            return await self.versions.get_version(session, gallery_id)
        except Exception as exc:
            await session.rollback()
            observe_cache_event("error")
            log.warning("gallery_version_unavailable gallery_id=%s err=%s", gallery_id, type(exc).__name__)
            return None

    async def _cache_get(self, key: str) -> dict[str, Any] | None:
        try:
            cached = await self.cache.get(key)
        except Exception as exc:
            observe_cache_event("error")
            log.warning("gallery_images_cache_get_failed key=%s err=%s", key, type(exc).__name__)
            return None
        observe_cache_event("hit" if cached is not None else "miss")
        return cached

    async def _cache_set(self, key: str, page: dict[str, Any]) -> None:
        try:
            await self.cache.set(key, page, ttl_s=float(self.cache_ttl_s))
        except Exception as exc:
            observe_cache_event("error")
            log.warning("gallery_images_cache_set_failed key=%s err=%s", key, type(exc).__name__)

    async def _compute(self, session: AsyncSession, query: FilterQuery, image_ids: list[int]) -> dict[str, Any]:
        existing = await get_existing_image_ids(session, image_ids=image_ids)
        gallery_ids = [i for i in image_ids if i in existing]
        if not gallery_ids:
            return empty_page()

        matches: list[set[int]] = []
        for category in query.requested_categories:
            tag_ids = await resolve_tag_ids(session, category=category, slugs=query.slugs_for(category))
            if not tag_ids:
                matches.append(set())
                continue
            matches.append(await image_ids_with_tags(session, tag_ids=tag_ids, candidate_ids=gallery_ids))

        filtered = combine_matches(gallery_ids, matches, mode=query.mode)
        total = len(filtered)
        pages = math.ceil(total / int(query.per_page))
        page_ids = filtered[query.offset : query.offset + int(query.per_page)]

        return {
            "items": await self._format_images(session, page_ids),
            "total": total,
            "pages": pages,
        }

    async def _format_images(self, session: AsyncSession, image_ids: list[int]) -> list[dict[str, Any]]:
        if not image_ids:
            return []
        images = await get_images_by_ids(session, image_ids=image_ids)
        assignments = await get_tag_assignments(session, image_ids=image_ids)
        return [
            self.format_image(images[i], assignments.get(i))
            for i in image_ids
            if i in images
        ]

    def format_image(
        self,
        image: Image,
        taxonomies: dict[str, list[dict[str, Any]]] | None,
    ) -> dict[str, Any]:
        taxonomies = taxonomies or {}
        return {
            "id": int(image.id),
            "title": image.title or "",
            "alt": image.alt or "",
            "card_number": image.card_number or "",
            "urls": self.renditions.urls(image),
            "taxonomies": {c: list(taxonomies.get(c) or []) for c in TAG_CATEGORIES},
        }
