from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20261019_0005"
down_revision = "20261019_0004"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "gallery_versions",
        sa.Column("gallery_id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )


def downgrade() -> None:
    op.drop_table("gallery_versions")
