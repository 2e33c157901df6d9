"""
Post endpoints (all private):
  POST   /api/posts                           — create a post
  GET    /api/posts                           — all posts, newest first
  GET    /api/posts/{id}                      — a single post
  DELETE /api/posts/{id}                      — delete own post
  PUT    /api/posts/like/{id}                 — like a post
  PUT    /api/posts/unlike/{id}               — remove own like
  POST   /api/posts/comment/{id}              — comment on a post
  DELETE /api/posts/comment/{id}/{comment_id} — delete own comment
"""
import logging

from fastapi import APIRouter, Depends
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.auth.gate import CurrentIdentity
from devconnector.database import get_db
from devconnector.schemas import (
    CommentInput,
    CommentResponse,
    LikeResponse,
    MessageResponse,
    PostInput,
    PostResponse,
)
from devconnector.services import posts as post_service

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post("", response_model=PostResponse)
async def create_post(
    body: PostInput, identity: CurrentIdentity, db: AsyncSession = Depends(get_db)
):
    with tracer.start_as_current_span("create_post") as span:
        post = await post_service.create_post(db, identity.id, body)
        span.set_attribute("post.id", post.post_id)
        return post


@router.get("", response_model=list[PostResponse])
async def list_posts(identity: CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await post_service.list_posts(db)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, identity: CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await post_service.get_post(db, post_id)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, identity: CurrentIdentity, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("delete_post") as span:
        span.set_attribute("post.id", post_id)
        await post_service.delete_post(db, post_id, identity.id)
        return MessageResponse(msg="Post removed")


@router.put("/like/{post_id}", response_model=list[LikeResponse])
async def like_post(post_id: str, identity: CurrentIdentity, db: AsyncSession = Depends(get_db)):
    """Like a post. Liking twice is a 400, not a no-op."""
    with tracer.start_as_current_span("like_post") as span:
        span.set_attribute("post.id", post_id)
        return await post_service.like_post(db, post_id, identity.id)


@router.put("/unlike/{post_id}", response_model=list[LikeResponse])
async def unlike_post(post_id: str, identity: CurrentIdentity, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("unlike_post") as span:
        span.set_attribute("post.id", post_id)
        return await post_service.unlike_post(db, post_id, identity.id)


@router.post("/comment/{post_id}", response_model=list[CommentResponse])
async def add_comment(
    post_id: str,
    body: CommentInput,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    with tracer.start_as_current_span("add_comment") as span:
        span.set_attribute("post.id", post_id)
        return await post_service.add_comment(db, post_id, identity.id, body)


@router.delete("/comment/{post_id}/{comment_id}", response_model=list[CommentResponse])
async def remove_comment(
    post_id: str,
    comment_id: str,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
):
    """Only the comment's author may delete it, even on someone else's post."""
    with tracer.start_as_current_span("remove_comment") as span:
        span.set_attribute("post.id", post_id)
        span.set_attribute("comment.id", comment_id)
        return await post_service.remove_comment(db, post_id, comment_id, identity.id)
