from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

NOW_SQL = "(strftime('%Y-%m-%dT%H:%M:%fZ','now'))"


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("post_type", sa.Text(), nullable=False, server_default=sa.text("'gallery'")),
        sa.Column("title", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("image_ids_json", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("created_at", sa.Text(), nullable=False, server_default=sa.text(NOW_SQL)),
        sa.Column("updated_at", sa.Text(), nullable=False, server_default=sa.text(NOW_SQL)),
    )
    op.create_index("idx_posts_type", "posts", ["post_type"])


def downgrade() -> None:
    op.drop_index("idx_posts_type", table_name="posts")
    op.drop_table("posts")
