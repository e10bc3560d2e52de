from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from gallery_quest.core.time import SQLITE_NOW_SQL
from gallery_quest.db.models.base import Base


class Tag(Base):
    __tablename__ = "tags"
    __table_args__ = (
        sa.UniqueConstraint("category", "slug", name="uq_tags_category_slug"),
        sa.CheckConstraint("category IN ('character','artist','rarity')", name="ck_tags_category"),
    )

    id: Mapped[int] = mapped_column(sa.Integer(), primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    name: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    slug: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    created_at: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text(SQLITE_NOW_SQL))
