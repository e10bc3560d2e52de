from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from gallery_quest.core.time import iso_utc_ms
from gallery_quest.db.models.posts import GALLERY_POST_TYPE, Post


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        # isdigit() accepts characters like "²" that int() rejects.
        try:
            i = int(value.strip())
        except ValueError:
            return None
        return i if i > 0 else None
    return None


def normalize_image_ids(values: Iterable[Any]) -> list[int]:
    """Keep positive integer references in first-seen order."""
    out: list[int] = []
    seen: set[int] = set()
    for raw in values:
        i = _positive_int(raw)
        if i is None or i in seen:
            continue
        seen.add(i)
        out.append(i)
    return out


def parse_image_ids(raw_json: str | None) -> list[int]:
    try:
        data = json.loads(raw_json or "[]")
    except (TypeError, ValueError):
        return []
    if not isinstance(data, list):
        return []
    return normalize_image_ids(data)


def get_image_list(gallery: Post) -> list[int]:
    return parse_image_ids(gallery.image_ids_json)


async def get_post(session: AsyncSession, *, post_id: int) -> Post | None:
    stmt = sa.select(Post).where(Post.id == int(post_id)).limit(1)
    return (await session.execute(stmt)).scalars().first()


async def get_gallery_by_id(session: AsyncSession, *, gallery_id: int) -> Post | None:
    post = await get_post(session, post_id=gallery_id)
    if post is None or post.post_type != GALLERY_POST_TYPE:
        return None
    return post


async def create_gallery(session: AsyncSession, *, title: str, image_ids: Iterable[Any]) -> Post:
    post = Post(
        post_type=GALLERY_POST_TYPE,
        title=title,
        image_ids_json=json.dumps(normalize_image_ids(image_ids)),
    )
    session.add(post)
    await session.flush()
    return post


async def set_image_list(session: AsyncSession, *, gallery: Post, image_ids: Iterable[Any]) -> list[int]:
    ids = normalize_image_ids(image_ids)
    gallery.image_ids_json = json.dumps(ids)
    gallery.updated_at = iso_utc_ms()
    await session.flush()
    return ids


async def delete_gallery(session: AsyncSession, *, gallery: Post) -> None:
    await session.delete(gallery)
    await session.flush()


async def gallery_ids_referencing_image(session: AsyncSession, *, image_id: int) -> list[int]:
    # Image lists are opaque JSON; parse them here rather than trusting SQLite's json_each.
    stmt = sa.select(Post.id, Post.image_ids_json).where(Post.post_type == GALLERY_POST_TYPE).order_by(Post.id.asc())
    rows = (await session.execute(stmt)).all()
    return [int(row[0]) for row in rows if int(image_id) in parse_image_ids(row[1])]
