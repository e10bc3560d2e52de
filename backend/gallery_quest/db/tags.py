from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from gallery_quest.core.filter_query import TAG_CATEGORIES
from gallery_quest.db.models.image_tags import ImageTag
from gallery_quest.db.models.tags import Tag


@dataclass(frozen=True, slots=True)
class TagListItem:
    id: int
    name: str
    slug: str
    count_images: int


async def resolve_tag_ids(session: AsyncSession, *, category: str, slugs: Iterable[str]) -> list[int]:
    slug_list = [s for s in slugs if s]
    if not slug_list:
        return []
    stmt = sa.select(Tag.id).where(Tag.category == category, Tag.slug.in_(slug_list)).order_by(Tag.id.asc())
    return [int(i) for i in (await session.execute(stmt)).scalars().all()]


async def image_ids_with_tags(
    session: AsyncSession,
    *,
    tag_ids: Iterable[int],
    candidate_ids: Iterable[int],
) -> set[int]:
    tags = [int(t) for t in tag_ids]
    candidates = [int(i) for i in candidate_ids]
    if not tags or not candidates:
        return set()
    stmt = (
        sa.select(ImageTag.image_id)
        .where(ImageTag.tag_id.in_(tags), ImageTag.image_id.in_(candidates))
        .distinct()
    )
    return {int(i) for i in (await session.execute(stmt)).scalars().all()}


async def get_tag_assignments(
    session: AsyncSession,
    *,
    image_ids: Iterable[int],
) -> dict[int, dict[str, list[dict[str, Any]]]]:
    ids = [int(i) for i in image_ids]
    out: dict[int, dict[str, list[dict[str, Any]]]] = {i: {c: [] for c in TAG_CATEGORIES} for i in ids}
    if not ids:
        return out

    stmt = (
        sa.select(ImageTag.image_id, Tag.id, Tag.name, Tag.slug, Tag.category)
        .join(Tag, Tag.id == ImageTag.tag_id)
        .where(ImageTag.image_id.in_(ids))
        .order_by(Tag.name.asc(), Tag.id.asc())
    )
    for image_id, tag_id, name, slug, category in (await session.execute(stmt)).all():
        bucket = out.get(int(image_id), {}).get(str(category))
        if bucket is None:
            continue
        bucket.append({"id": int(tag_id), "name": str(name), "slug": str(slug)})
    return out


async def list_tags(session: AsyncSession, *, category: str) -> list[TagListItem]:
    stmt = (
        sa.select(Tag.id, Tag.name, Tag.slug, sa.func.count(ImageTag.image_id).label("count_images"))
        .outerjoin(ImageTag, ImageTag.tag_id == Tag.id)
        .where(Tag.category == category)
        .group_by(Tag.id)
        .order_by(Tag.name.asc(), Tag.id.asc())
    )
    return [
        TagListItem(id=int(row[0]), name=str(row[1]), slug=str(row[2]), count_images=int(row[3] or 0))
        for row in (await session.execute(stmt)).all()
    ]


async def get_tag_by_slug(session: AsyncSession, *, category: str, slug: str) -> Tag | None:
    stmt = sa.select(Tag).where(Tag.category == category, Tag.slug == slug).limit(1)
    return (await session.execute(stmt)).scalars().first()


async def create_tag(session: AsyncSession, *, category: str, name: str, slug: str) -> Tag:
    tag = Tag(category=category, name=name, slug=slug)
    session.add(tag)
    await session.flush()
    return tag


async def get_tag_ids_in_category(session: AsyncSession, *, category: str, tag_ids: Iterable[int]) -> set[int]:
    ids = [int(t) for t in tag_ids]
    if not ids:
        return set()
    stmt = sa.select(Tag.id).where(Tag.category == category, Tag.id.in_(ids))
    return {int(i) for i in (await session.execute(stmt)).scalars().all()}


async def set_image_tags(session: AsyncSession, *, image_id: int, category: str, tag_ids: Iterable[int]) -> None:
    """Replace the image's assignments within one category; other categories are untouched."""
    in_category = sa.select(Tag.id).where(Tag.category == category)
    await session.execute(
        sa.delete(ImageTag).where(ImageTag.image_id == int(image_id), ImageTag.tag_id.in_(in_category))
    )
    for tag_id in sorted({int(t) for t in tag_ids}):
        session.add(ImageTag(image_id=int(image_id), tag_id=tag_id))
    await session.flush()
