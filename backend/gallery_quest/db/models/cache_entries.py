from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from gallery_quest.db.models.base import Base


class CacheEntry(Base):
    __tablename__ = "cache_entries"
    __table_args__ = (sa.Index("idx_cache_entries_expires_at", "expires_at"),)

    key: Mapped[str] = mapped_column(sa.Text(), primary_key=True)
    value_json: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    expires_at: Mapped[float] = mapped_column(sa.Float(), nullable=False)
