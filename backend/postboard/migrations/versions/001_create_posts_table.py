"""Create posts table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `posts` table with the four v1 columns.
Why:   Databases created before migrations were tracked already have this
       table; the step is skipped for them and only recorded as applied.

Rollback: downgrade() drops the table entirely (destructive, all posts are lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import context, op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --sql mode has no connection to inspect
    if not context.is_offline_mode() and sa.inspect(op.get_bind()).has_table("posts"):
        return

    op.create_table(
        "posts",
        # AUTOINCREMENT: ids of deleted posts are never reused
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        # Opaque caller-supplied string, never parsed
        sa.Column("date", sa.Text(), nullable=False),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table("posts")
