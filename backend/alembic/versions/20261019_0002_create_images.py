from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None

NOW_SQL = "(strftime('%Y-%m-%dT%H:%M:%fZ','now'))"


def upgrade() -> None:
    op.create_table(
        "images",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("alt", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("card_number", sa.Text(), nullable=True),
        sa.Column("file_path", sa.Text(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.Text(), nullable=False, server_default=sa.text(NOW_SQL)),
        sa.Column("updated_at", sa.Text(), nullable=False, server_default=sa.text(NOW_SQL)),
    )


def downgrade() -> None:
    op.drop_table("images")
