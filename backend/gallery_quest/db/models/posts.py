from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from gallery_quest.core.time import SQLITE_NOW_SQL
from gallery_quest.db.models.base import Base

GALLERY_POST_TYPE = "gallery"


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (sa.Index("idx_posts_type", "post_type"),)

    id: Mapped[int] = mapped_column(sa.Integer(), primary_key=True, autoincrement=True)
    post_type: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text("'gallery'"))
    title: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text("''"))

    # Ordered image references, serialized as a JSON list. Entries are not
    # validated on write, so readers must tolerate junk.
    image_ids_json: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text("'[]'"))

    created_at: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text(SQLITE_NOW_SQL))
    updated_at: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text(SQLITE_NOW_SQL))
