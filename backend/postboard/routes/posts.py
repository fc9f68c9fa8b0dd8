"""
Postboard Backend — Post Route Handlers
=========================================

What:  The post CRUD and read-state endpoints.
How:   Two routers, mounted by create_app():
         - `router`: list / create / delete. Mounted under the API prefix
           and, while legacy routes are enabled, unprefixed as well.
         - `read_state_router`: unread count / mark read. API prefix only.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.schemas.post import (
    ErrorResponse,
    PostCreate,
    PostResponse,
    SuccessResponse,
    UnreadCountResponse,
)
from postboard.services.post_service import post_service

logger = logging.getLogger(__name__)

# SQLite INTEGER is a signed 64-bit value; ids outside it can match no row
SQLITE_INT_MIN = -(2 ** 63)
SQLITE_INT_MAX = 2 ** 63 - 1

router = APIRouter(tags=["Posts"])
read_state_router = APIRouter(tags=["Read State"])


@router.get(
    "/posts",
    response_model=List[PostResponse],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all posts, newest first",
)
async def list_posts(db: AsyncSession = Depends(get_db_session)) -> List[PostResponse]:
    return await post_service.list_posts(db)


@router.post(
    "/posts",
    status_code=201,
    response_model=PostResponse,
    responses={
        201: {"description": "Post created", "model": PostResponse},
        400: {"description": "Missing field or invalid JSON", "model": ErrorResponse},
        413: {"description": "Body larger than the size cap", "model": ErrorResponse},
    },
    summary="Create a post",
    description="Requires non-empty `title`, `content` and `date`. New posts start unread.",
)
async def create_post(
    payload: PostCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.create_post(db, payload)


@router.delete(
    "/posts/{post_id}",
    response_model=SuccessResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Delete a post",
)
async def delete_post(
    post_id: int = Path(..., ge=SQLITE_INT_MIN, le=SQLITE_INT_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await post_service.delete_post(db, post_id)
    return SuccessResponse()


@read_state_router.get(
    "/posts/unread-count",
    response_model=UnreadCountResponse,
    summary="Count unread posts",
)
async def unread_count(db: AsyncSession = Depends(get_db_session)) -> UnreadCountResponse:
    return UnreadCountResponse(unread=await post_service.unread_count(db))


@read_state_router.post(
    "/posts/{post_id}/read",
    response_model=SuccessResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Mark a post as read",
    description="Idempotent: marking an already-read post succeeds again.",
)
async def mark_post_read(
    post_id: int = Path(..., ge=SQLITE_INT_MIN, le=SQLITE_INT_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await post_service.mark_read(db, post_id)
    return SuccessResponse()
