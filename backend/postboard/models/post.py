"""
Postboard Backend — Post SQLAlchemy Model
===========================================

What:  ORM model representing the `posts` table.
Why:   Maps Python objects to rows for PostService; Alembic reads the metadata.

Table Design:
    - INTEGER primary key with AUTOINCREMENT: ids are strictly increasing and
      a deleted id is never handed out again
    - date: opaque string supplied by the caller, never parsed
    - read: 0/1 flag; stored as INTEGER so the API returns 0 or 1
"""

from sqlalchemy import Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from postboard.database import Base


class Post(Base):
    """
    A single blog entry.

    Lifecycle:
        1. Created by POST /api/posts (read = 0)
        2. Optionally marked read by POST /api/posts/{id}/read (read = 1)
        3. Removed by DELETE /api/posts/{id}
    """

    __tablename__ = "posts"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title='{self.title}', read={self.read})>"
