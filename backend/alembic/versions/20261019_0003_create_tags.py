from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None

NOW_SQL = "(strftime('%Y-%m-%dT%H:%M:%fZ','now'))"


def upgrade() -> None:
    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("created_at", sa.Text(), nullable=False, server_default=sa.text(NOW_SQL)),
        sa.UniqueConstraint("category", "slug", name="uq_tags_category_slug"),
        sa.CheckConstraint("category IN ('character','artist','rarity')", name="ck_tags_category"),
    )


def downgrade() -> None:
    op.drop_table("tags")
