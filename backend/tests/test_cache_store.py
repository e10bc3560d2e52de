from __future__ import annotations

import asyncio
from pathlib import Path

from gallery_quest.core.cache import DbCacheStore, MemoryCacheStore, build_cache_store
from gallery_quest.db.engine import create_engine
from gallery_quest.db.models.base import Base


class _Clock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_memory_cache_store_ttl_and_isolation() -> None:
    clock = _Clock(1000.0)
    store = MemoryCacheStore(now=clock)

    async def _run() -> None:
        page = {"items": [{"id": 1}], "total": 1, "pages": 1}
        await store.set("k", page, ttl_s=900)
        page["items"].clear()

        got = await store.get("k")
        assert got == {"items": [{"id": 1}], "total": 1, "pages": 1}
        got["total"] = 99
        assert (await store.get("k"))["total"] == 1

        clock.now = 1899.0
        assert await store.get("k") is not None
        clock.now = 1900.0
        assert await store.get("k") is None
        assert await store.get("missing") is None

    asyncio.run(_run())


def test_memory_cache_store_purge_and_bound() -> None:
    clock = _Clock(0.0)
    store = MemoryCacheStore(now=clock, max_entries=2)

    async def _run() -> None:
        await store.set("a", 1, ttl_s=10)
        await store.set("b", 2, ttl_s=100)
        clock.now = 50.0
        assert await store.purge_expired() == 1
        await store.set("c", 3, ttl_s=100)
        await store.set("d", 4, ttl_s=100)
        assert await store.get("b") is None
        assert await store.get("c") == 3
        assert await store.get("d") == 4

    asyncio.run(_run())


def test_db_cache_store_roundtrip_expiry_and_purge(tmp_path: Path) -> None:
    db_url = "sqlite+aiosqlite:///" + (tmp_path / "cache.db").as_posix()
    engine = create_engine(db_url)
    clock = _Clock(1000.0)
    store = DbCacheStore(engine, now=clock)

    async def _run() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        await store.set("gallery_images:1:abc", {"items": [], "total": 0, "pages": 0}, ttl_s=900)
        assert await store.get("gallery_images:1:abc") == {"items": [], "total": 0, "pages": 0}

        await store.set("gallery_images:1:abc", {"items": [], "total": 5, "pages": 1}, ttl_s=900)
        assert (await store.get("gallery_images:1:abc"))["total"] == 5

        await store.set("short", "x", ttl_s=10)
        clock.now = 1010.0
        assert await store.get("short") is None
        assert await store.purge_expired() == 1
        assert await store.get("gallery_images:1:abc") is not None

        await engine.dispose()

    asyncio.run(_run())


def test_build_cache_store(tmp_path: Path) -> None:
    engine = create_engine("sqlite+aiosqlite:///" + (tmp_path / "b.db").as_posix())
    assert isinstance(build_cache_store("memory", engine=engine), MemoryCacheStore)
    assert isinstance(build_cache_store("db", engine=engine), DbCacheStore)
    asyncio.run(engine.dispose())
