"""Initial schema — saved booking views.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "saved_views",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.String(128), nullable=False),
        sa.Column("view_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("scope", sa.String(20), nullable=False, server_default="upcoming"),
        sa.Column("status", sa.String(40), nullable=False, server_default="all"),
        sa.Column("driver", sa.String(200), nullable=False, server_default="all"),
        sa.Column("payment", sa.String(40), nullable=False, server_default="all"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("uq_saved_views_owner_view", "saved_views", ["owner_id", "view_id"], unique=True)
    op.create_index("idx_saved_views_owner", "saved_views", ["owner_id"])


def downgrade() -> None:
    op.drop_index("idx_saved_views_owner", table_name="saved_views")
    op.drop_index("uq_saved_views_owner_view", table_name="saved_views")
    op.drop_table("saved_views")
