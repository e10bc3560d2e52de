from __future__ import annotations

import asyncio
import os
import random
import sqlite3
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import OperationalError, TimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

T = TypeVar("T")

_BUSY_MESSAGES = (
    "database is locked",
    "database table is locked",
    "database schema is locked",
    "database is busy",
)


def is_sqlite_busy_error(exc: BaseException) -> bool:
    if isinstance(exc, TimeoutError):
        return True
    if isinstance(exc, sqlite3.OperationalError):
        msg = str(exc).lower()
        return any(m in msg for m in _BUSY_MESSAGES)
    if isinstance(exc, OperationalError):
        orig = getattr(exc, "orig", None)
        return is_sqlite_busy_error(orig) if isinstance(orig, BaseException) else False
    return False


def _env_float(key: str, default: float, *, min_v: float, max_v: float) -> float:
    try:
        value = float((os.environ.get(key) or "").strip() or default)
    except Exception:
        value = float(default)
    return float(max(min_v, min(value, max_v)))


async def with_sqlite_busy_retry(
    op: Callable[[], Awaitable[T]],
    *,
    retries: int = 6,
    base_delay_s: float = 0.05,
) -> T:
    retries_i = int(_env_float("SQLITE_BUSY_RETRIES", retries, min_v=0, max_v=50))
    base_delay = _env_float("SQLITE_BUSY_BASE_DELAY_S", base_delay_s, min_v=0.0, max_v=5.0)
    max_delay = _env_float("SQLITE_BUSY_MAX_DELAY_S", 2.0, min_v=0.0, max_v=30.0)

    attempt = 0
    while True:
        try:
            return await op()
        except Exception as exc:
            if attempt >= retries_i or not is_sqlite_busy_error(exc):
                raise
            delay = min(base_delay * (2**attempt), max_delay) if max_delay > 0 else base_delay * (2**attempt)
            if delay > 0:
                # Jitter keeps concurrent writers from retrying in lockstep.
                await asyncio.sleep(delay * (0.9 + random.random() * 0.2))
            attempt += 1


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
