from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from gallery_quest.core.time import SQLITE_NOW_SQL
from gallery_quest.db.models.base import Base


class Image(Base):
    __tablename__ = "images"

    id: Mapped[int] = mapped_column(sa.Integer(), primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text("''"))
    alt: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text("''"))
    card_number: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)

    file_path: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    width: Mapped[int | None] = mapped_column(sa.Integer(), nullable=True)
    height: Mapped[int | None] = mapped_column(sa.Integer(), nullable=True)

    created_at: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text(SQLITE_NOW_SQL))
    updated_at: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default=sa.text(SQLITE_NOW_SQL))
