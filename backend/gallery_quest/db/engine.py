from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

# Editor saves and cache writes share the single SQLite writer lock; keep the
# busy timeout generous so readers wait instead of failing.
SQLITE_BUSY_TIMEOUT_MS = 15_000
SQLITE_POOL_SIZE = 10
SQLITE_MAX_OVERFLOW = 10


def _env_int(key: str, default: int, *, min_v: int, max_v: int) -> int:
    try:
        value = int((os.environ.get(key) or str(default)).strip() or default)
    except Exception:
        value = int(default)
    return max(min_v, min(int(value), max_v))


def apply_sqlite_pragmas(dbapi_connection: Any) -> None:
    busy_timeout_ms = _env_int("SQLITE_BUSY_TIMEOUT_MS", SQLITE_BUSY_TIMEOUT_MS, min_v=1000, max_v=5 * 60_000)

    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys = ON")
        try:
            cursor.execute("PRAGMA journal_mode = WAL")
            cursor.fetchone()
        except Exception:
            pass
        cursor.execute("PRAGMA synchronous = NORMAL")
        cursor.execute(f"PRAGMA busy_timeout = {busy_timeout_ms}")
    finally:
        cursor.close()


def sqlite_file_path(database_url: str) -> Path | None:
    try:
        url = make_url(database_url)
    except Exception:
        return None
    if (url.get_backend_name() or "").lower() != "sqlite":
        return None
    db = str(url.database or "").strip()
    if not db or db == ":memory:":
        return None
    return Path(db).expanduser()


def ensure_sqlite_dir(database_url: str) -> None:
    path = sqlite_file_path(database_url)
    if path is not None:
        path.resolve().parent.mkdir(parents=True, exist_ok=True)


def create_engine(database_url: str) -> AsyncEngine:
    kwargs: dict[str, Any] = {}
    is_sqlite = database_url.lower().startswith("sqlite")
    if is_sqlite:
        busy_timeout_ms = _env_int("SQLITE_BUSY_TIMEOUT_MS", SQLITE_BUSY_TIMEOUT_MS, min_v=1000, max_v=5 * 60_000)
        kwargs["connect_args"] = {"timeout": float(busy_timeout_ms) / 1000.0}
        if sqlite_file_path(database_url) is not None:
            kwargs["pool_size"] = _env_int("SQLITE_POOL_SIZE", SQLITE_POOL_SIZE, min_v=1, max_v=200)
            kwargs["max_overflow"] = _env_int("SQLITE_MAX_OVERFLOW", SQLITE_MAX_OVERFLOW, min_v=0, max_v=200)
            ensure_sqlite_dir(database_url)

    engine = create_async_engine(database_url, **kwargs)

    if is_sqlite:
        def _on_connect(dbapi_connection: Any, _record: Any) -> None:
            apply_sqlite_pragmas(dbapi_connection)

        event.listen(engine.sync_engine, "connect", _on_connect)

    return engine
