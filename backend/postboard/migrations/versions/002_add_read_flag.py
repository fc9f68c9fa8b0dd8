"""Add read flag to posts

Revision ID: 002
Revises: 001
Create Date: 2024-02-01 00:00:00.000000+00:00

What:  Adds `read INTEGER NOT NULL DEFAULT 0`; existing rows become unread.
Why:   Backs GET /api/posts/unread-count and POST /api/posts/{id}/read.
How:   Skipped when the column already exists, so databases that picked up
       the column outside of Alembic are only recorded as migrated.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import context, op

# revision identifiers
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _post_columns() -> set:
    return {column["name"] for column in sa.inspect(op.get_bind()).get_columns("posts")}


def upgrade() -> None:
    if not context.is_offline_mode() and "read" in _post_columns():
        return

    op.add_column(
        "posts",
        sa.Column("read", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )


def downgrade() -> None:
    # SQLite cannot drop columns in place; batch mode rebuilds the table
    with op.batch_alter_table("posts") as batch_op:
        batch_op.drop_column("read")
