from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

import sqlalchemy as sa
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine

from gallery_quest.db.models.cache_entries import CacheEntry
from gallery_quest.db.session import create_sessionmaker, with_sqlite_busy_retry


class CacheStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, *, ttl_s: float) -> None: ...

    async def purge_expired(self) -> int: ...


def _encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


@dataclass(slots=True)
class _MemoryEntry:
    value_json: str
    expires_at: float


@dataclass(slots=True)
class MemoryCacheStore:
    """In-process cache. Values are kept serialized so callers never share mutable state."""

    now: Callable[[], float] = time.time
    max_entries: int = 10_000
    _items: dict[str, _MemoryEntry] = field(default_factory=dict)

    async def get(self, key: str) -> Any | None:
        item = self._items.get(key)
        if item is None:
            return None
        if item.expires_at <= float(self.now()):
            self._items.pop(key, None)
            return None
        return json.loads(item.value_json)

    async def set(self, key: str, value: Any, *, ttl_s: float) -> None:
        if float(ttl_s) <= 0:
            self._items.pop(key, None)
            return
        self._items[key] = _MemoryEntry(value_json=_encode(value), expires_at=float(self.now()) + float(ttl_s))
        if len(self._items) > int(self.max_entries):
            await self.purge_expired()
        while len(self._items) > int(self.max_entries):
            # Oldest insertion first.
            self._items.pop(next(iter(self._items)))

    async def purge_expired(self) -> int:
        now = float(self.now())
        expired = [k for k, v in self._items.items() if v.expires_at <= now]
        for k in expired:
            del self._items[k]
        return len(expired)


@dataclass(slots=True)
class DbCacheStore:
    """Cache rows in `cache_entries`; expired rows are ignored on read and purged on demand."""

    engine: AsyncEngine
    now: Callable[[], float] = time.time

    async def get(self, key: str) -> Any | None:
        Session = create_sessionmaker(self.engine)

        async def _op() -> str | None:
            async with Session() as session:
                stmt = sa.select(CacheEntry.value_json).where(
                    CacheEntry.key == key,
                    CacheEntry.expires_at > float(self.now()),
                )
                return (await session.execute(stmt)).scalar_one_or_none()

        raw = await with_sqlite_busy_retry(_op)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any, *, ttl_s: float) -> None:
        Session = create_sessionmaker(self.engine)
        expires_at = float(self.now()) + float(ttl_s)
        value_json = _encode(value)

        async def _op() -> None:
            async with Session() as session:
                stmt = sqlite_insert(CacheEntry).values(key=key, value_json=value_json, expires_at=expires_at)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["key"],
                    set_={"value_json": stmt.excluded.value_json, "expires_at": stmt.excluded.expires_at},
                )
                await session.execute(stmt)
                await session.commit()

        await with_sqlite_busy_retry(_op)

    async def purge_expired(self) -> int:
        Session = create_sessionmaker(self.engine)

        async def _op() -> int:
            async with Session() as session:
                result = await session.execute(sa.delete(CacheEntry).where(CacheEntry.expires_at <= float(self.now())))
                await session.commit()
                return int(result.rowcount or 0)

        return await with_sqlite_busy_retry(_op)


def build_cache_store(backend: str, *, engine: AsyncEngine) -> CacheStore:
    if backend == "memory":
        return MemoryCacheStore()
    if backend == "db":
        return DbCacheStore(engine)
    raise ValueError(f"unsupported cache backend: {backend!r}")
