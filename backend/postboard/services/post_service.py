"""
Postboard Backend — Post Service (Business Logic)
===================================================

What:  The post store operations: list, create, delete, mark read, unread count.
Why:   Keeps validation and SQL out of the route handlers so both can be
       tested on their own.
How:   Each method issues exactly one SQL statement on the session it is
       given; the session is committed or rolled back by get_db_session().

Error Handling Strategy:
    ValidationError and NotFoundError are raised for client mistakes.
    SQLAlchemy errors are logged with detail and re-raised as InternalError,
    whose response body carries only a generic message.
"""

import logging
from typing import List

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.exceptions import InternalError, NotFoundError, ValidationError
from postboard.models.post import Post
from postboard.schemas.post import PostCreate, PostResponse

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "content", "date")


class PostService:
    """
    Stateless service over the `posts` table.

    Responsibilities:
        - list_posts(): every post, newest id first
        - create_post(): validate required fields, insert with read = 0
        - delete_post(): remove by id, 404 when absent
        - mark_read(): set read = 1 by id, 404 when absent (idempotent)
        - unread_count(): COUNT of rows with read = 0
    """

    async def list_posts(self, db: AsyncSession) -> List[PostResponse]:
        """
        Return all posts ordered by id descending.

        Ordering is by insertion (id), not by the caller-supplied date.
        """
        try:
            result = await db.execute(select(Post).order_by(desc(Post.id)))
            posts = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise InternalError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        return [PostResponse.model_validate(post) for post in posts]

    async def create_post(self, db: AsyncSession, payload: PostCreate) -> PostResponse:
        """
        Insert a new post and return it with its assigned id.

        Raises:
            ValidationError: title, content or date missing or empty (→ 400)
            InternalError: the INSERT failed (→ 500)
        """
        missing = [name for name in REQUIRED_FIELDS if not getattr(payload, name)]
        if missing:
            raise ValidationError(
                message=f"{', '.join(REQUIRED_FIELDS)} are required and must be non-empty",
                fields=missing,
            )

        post = Post(
            title=payload.title,
            content=payload.content,
            date=payload.date,
            read=0,
        )
        try:
            db.add(post)
            await db.flush()  # Assigns the id without committing
        except SQLAlchemyError as e:
            logger.error("Database error creating post: %s", str(e), exc_info=True)
            raise InternalError(
                message="Could not save the post. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Post %s created", post.id)
        return PostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, post_id: int) -> None:
        """
        Delete a post by id.

        Raises:
            NotFoundError: no row has this id (→ 404)
        """
        result = await self._execute_by_id(
            db,
            delete(Post).where(Post.id == post_id),
            post_id,
            action="deleting",
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="post", resource_id=str(post_id))

        logger.info("Post %s deleted", post_id)

    async def mark_read(self, db: AsyncSession, post_id: int) -> None:
        """
        Set read = 1 on a post.

        Idempotent: the UPDATE matches an already-read row too, so marking
        twice still succeeds.

        Raises:
            NotFoundError: no row has this id (→ 404)
        """
        result = await self._execute_by_id(
            db,
            update(Post).where(Post.id == post_id).values(read=1),
            post_id,
            action="marking read",
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="post", resource_id=str(post_id))

        logger.info("Post %s marked read", post_id)

    async def unread_count(self, db: AsyncSession) -> int:
        """Number of posts with read = 0 (0 when there are none)."""
        try:
            result = await db.execute(
                select(func.count()).select_from(Post).where(Post.read == 0)
            )
        except SQLAlchemyError as e:
            logger.error("Database error counting unread posts: %s", str(e), exc_info=True)
            raise InternalError(
                message="Could not count unread posts. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        return result.scalar_one() or 0

    async def _execute_by_id(self, db: AsyncSession, statement, post_id: int, action: str):
        try:
            return await db.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Database error %s post %s: %s", action, post_id, str(e), exc_info=True)
            raise InternalError(
                message="Could not update the post. Please try again.",
                context={"post_id": post_id, "error_type": type(e).__name__},
            ) from e


# ── Singleton Instance ────────────────────────────────────────────────────
# PostService keeps no per-instance state
post_service = PostService()
