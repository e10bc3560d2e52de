from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from gallery_quest.db.models.base import Base


class GalleryVersion(Base):
    __tablename__ = "gallery_versions"

    # No FK to posts: the counter must outlive a deleted gallery so that
    # a re-used id never resurrects stale cache keys.
    gallery_id: Mapped[int] = mapped_column(sa.Integer(), primary_key=True, autoincrement=False)
    version: Mapped[int] = mapped_column(sa.Integer(), nullable=False, server_default=sa.text("1"))
