from __future__ import annotations

from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from gallery_quest.db.models.gallery_versions import GalleryVersion
from gallery_quest.db.session import create_sessionmaker, with_sqlite_busy_retry

INITIAL_VERSION = 1


async def _increment(session: AsyncSession, gallery_id: int) -> int:
    stmt = sqlite_insert(GalleryVersion).values(
        gallery_id=int(gallery_id),
        version=INITIAL_VERSION + 1,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["gallery_id"],
        set_={"version": GalleryVersion.version + 1},
    ).returning(GalleryVersion.version)
    return int((await session.execute(stmt)).scalar_one())


@dataclass(frozen=True, slots=True)
class VersionStore:
    engine: AsyncEngine

    async def get_version(self, session: AsyncSession, gallery_id: int) -> int:
        """Read the counter without writing; an absent row reads as INITIAL_VERSION."""
        stmt = sa.select(GalleryVersion.version).where(GalleryVersion.gallery_id == int(gallery_id))
        version = (await session.execute(stmt)).scalar_one_or_none()
        return int(version) if version is not None else INITIAL_VERSION

    async def get_or_init_version(self, gallery_id: int) -> int:
        Session = create_sessionmaker(self.engine)

        async def _op() -> int:
            async with Session() as session:
                insert = (
                    sqlite_insert(GalleryVersion)
                    .values(gallery_id=int(gallery_id), version=INITIAL_VERSION)
                    .on_conflict_do_nothing(index_elements=["gallery_id"])
                )
                await session.execute(insert)
                version = await self.get_version(session, gallery_id)
                await session.commit()
                return version

        return await with_sqlite_busy_retry(_op)

    async def atomic_increment(self, gallery_id: int, *, session: AsyncSession | None = None) -> int:
        """Bump the counter in one statement; an absent row counts as INITIAL_VERSION.

        With `session`, the bump joins the caller's transaction and commits with it.
        """
        if session is not None:
            return await _increment(session, gallery_id)

        Session = create_sessionmaker(self.engine)

        async def _op() -> int:
            async with Session() as own:
                version = await _increment(own, gallery_id)
                await own.commit()
                return version

        return await with_sqlite_busy_retry(_op)
