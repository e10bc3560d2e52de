from __future__ import annotations

from collections.abc import Iterable

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from gallery_quest.db.models.images import Image


async def get_image_by_id(session: AsyncSession, *, image_id: int) -> Image | None:
    stmt = sa.select(Image).where(Image.id == int(image_id)).limit(1)
    return (await session.execute(stmt)).scalars().first()


async def get_existing_image_ids(session: AsyncSession, *, image_ids: Iterable[int]) -> set[int]:
    ids = [int(i) for i in image_ids]
    if not ids:
        return set()
    stmt = sa.select(Image.id).where(Image.id.in_(ids))
    return {int(i) for i in (await session.execute(stmt)).scalars().all()}


async def get_images_by_ids(session: AsyncSession, *, image_ids: Iterable[int]) -> dict[int, Image]:
    ids = [int(i) for i in image_ids]
    if not ids:
        return {}
    stmt = sa.select(Image).where(Image.id.in_(ids))
    return {int(img.id): img for img in (await session.execute(stmt)).scalars().all()}


async def create_image(
    session: AsyncSession,
    *,
    title: str,
    alt: str,
    file_path: str | None,
    width: int | None,
    height: int | None,
    card_number: str | None,
) -> Image:
    image = Image(
        title=title,
        alt=alt,
        file_path=file_path,
        width=width,
        height=height,
        card_number=card_number or None,
    )
    session.add(image)
    await session.flush()
    return image
