from __future__ import annotations

from datetime import datetime, timezone

SQLITE_NOW_SQL = "(strftime('%Y-%m-%dT%H:%M:%fZ','now'))"


def iso_utc_ms(dt: datetime | None = None) -> str:
    dt = dt or datetime.now(timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
