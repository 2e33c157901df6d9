"""
Posts and their nested collections.

  likes    — one row per (post, user); newest first
  comments — one row per comment, addressed by comment_id; newest first

Every mutation names its target by a stable key (user_id / comment_id) and is
applied as a single conditional statement against the store:

  like       INSERT, rejected by the (post_id, user_id) unique constraint
  unlike     DELETE … WHERE post_id AND user_id, zero rows → not liked
  uncomment  DELETE … WHERE comment_id AND user_id

so two concurrent requests for the same pair cannot both succeed, and a
removal can never hit an element other than the one that was matched.
"""
import logging
from collections import defaultdict

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.errors import (
    AlreadyLiked,
    CommentNotFound,
    NotLiked,
    PostNotFound,
    Unauthorized,
    UserNotFound,
)
from devconnector.models import Comment, Like, Post, User
from devconnector.schemas import (
    CommentInput,
    CommentResponse,
    LikeResponse,
    PostInput,
    PostResponse,
)
from devconnector.telemetry import (
    POST_REACTIONS_TOTAL,
    POST_REJECTIONS_TOTAL,
    POSTS_CREATED_TOTAL,
)

logger = logging.getLogger(__name__)


def _build_post_response(
    post: Post, likes: list[Like], comments: list[Comment]
) -> PostResponse:
    return PostResponse(
        post_id=post.post_id,
        user_id=post.user_id,
        text=post.text,
        name=post.name,
        avatar=post.avatar,
        created_at=post.created_at,
        likes=[LikeResponse.model_validate(like) for like in likes],
        comments=[CommentResponse.model_validate(c) for c in comments],
    )


async def _get_post(db: AsyncSession, post_id: str) -> Post:
    post = await db.get(Post, post_id)
    if post is None:
        raise PostNotFound()
    return post


async def _get_author(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFound()
    return user


async def list_likes(db: AsyncSession, post_id: str) -> list[LikeResponse]:
    rows = await db.execute(
        select(Like).where(Like.post_id == post_id).order_by(Like.seq.desc())
    )
    return [LikeResponse.model_validate(like) for like in rows.scalars().all()]


async def list_comments(db: AsyncSession, post_id: str) -> list[CommentResponse]:
    rows = await db.execute(
        select(Comment).where(Comment.post_id == post_id).order_by(Comment.seq.desc())
    )
    return [CommentResponse.model_validate(c) for c in rows.scalars().all()]


async def _has_liked(db: AsyncSession, post_id: str, user_id: str) -> bool:
    rows = await db.execute(
        select(Like.seq).where(Like.post_id == post_id, Like.user_id == user_id)
    )
    return rows.first() is not None


# ─────────────────────────── Posts ────────────────────────────────────────

async def create_post(db: AsyncSession, identity_id: str, body: PostInput) -> PostResponse:
    author = await _get_author(db, identity_id)
    post = Post(
        user_id=identity_id,
        text=body.text,
        name=author.name,
        avatar=author.avatar,
    )
    db.add(post)
    await db.flush()

    POSTS_CREATED_TOTAL.inc()
    logger.info("Post created: %s by user %s", post.post_id, identity_id)
    return _build_post_response(post, [], [])


async def list_posts(db: AsyncSession) -> list[PostResponse]:
    """All posts, newest first, with their likes and comments."""
    rows = await db.execute(select(Post).order_by(Post.created_at.desc()))
    posts = list(rows.scalars().all())
    if not posts:
        return []

    post_ids = [p.post_id for p in posts]
    likes_by_post: dict[str, list[Like]] = defaultdict(list)
    comments_by_post: dict[str, list[Comment]] = defaultdict(list)

    like_rows = await db.execute(
        select(Like).where(Like.post_id.in_(post_ids)).order_by(Like.seq.desc())
    )
    for like in like_rows.scalars():
        likes_by_post[like.post_id].append(like)

    comment_rows = await db.execute(
        select(Comment).where(Comment.post_id.in_(post_ids)).order_by(Comment.seq.desc())
    )
    for comment in comment_rows.scalars():
        comments_by_post[comment.post_id].append(comment)

    return [
        _build_post_response(p, likes_by_post[p.post_id], comments_by_post[p.post_id])
        for p in posts
    ]


async def get_post(db: AsyncSession, post_id: str) -> PostResponse:
    post = await _get_post(db, post_id)
    likes = await db.execute(
        select(Like).where(Like.post_id == post_id).order_by(Like.seq.desc())
    )
    comments = await db.execute(
        select(Comment).where(Comment.post_id == post_id).order_by(Comment.seq.desc())
    )
    return _build_post_response(
        post, list(likes.scalars().all()), list(comments.scalars().all())
    )


async def delete_post(db: AsyncSession, post_id: str, identity_id: str) -> None:
    """Remove a post together with its likes and comments. Owner only."""
    post = await _get_post(db, post_id)
    if post.user_id != identity_id:
        raise Unauthorized()

    await db.execute(delete(Like).where(Like.post_id == post_id))
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.delete(post)
    await db.flush()
    logger.info("Post removed: %s by user %s", post_id, identity_id)


# ─────────────────────────── Likes ────────────────────────────────────────

async def like_post(db: AsyncSession, post_id: str, identity_id: str) -> list[LikeResponse]:
    """
    Add the caller's like. A second like from the same user is rejected with
    AlreadyLiked rather than silently accepted.
    """
    await _get_post(db, post_id)
    await _get_author(db, identity_id)

    db.add(Like(post_id=post_id, user_id=identity_id))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        if await _has_liked(db, post_id, identity_id):
            POST_REJECTIONS_TOTAL.labels(reason="already_liked").inc()
            raise AlreadyLiked()
        # Post vanished between the lookup and the insert
        raise PostNotFound()

    POST_REACTIONS_TOTAL.labels(action="like").inc()
    return await list_likes(db, post_id)


async def unlike_post(db: AsyncSession, post_id: str, identity_id: str) -> list[LikeResponse]:
    await _get_post(db, post_id)

    result = await db.execute(
        delete(Like).where(Like.post_id == post_id, Like.user_id == identity_id)
    )
    if result.rowcount == 0:
        POST_REJECTIONS_TOTAL.labels(reason="not_liked").inc()
        raise NotLiked()

    POST_REACTIONS_TOTAL.labels(action="unlike").inc()
    return await list_likes(db, post_id)


# ─────────────────────────── Comments ─────────────────────────────────────

async def add_comment(
    db: AsyncSession, post_id: str, identity_id: str, body: CommentInput
) -> list[CommentResponse]:
    await _get_post(db, post_id)
    author = await _get_author(db, identity_id)

    db.add(
        Comment(
            post_id=post_id,
            user_id=identity_id,
            text=body.text,
            name=author.name,
            avatar=author.avatar,
        )
    )
    await db.flush()

    POST_REACTIONS_TOTAL.labels(action="comment").inc()
    return await list_comments(db, post_id)


async def remove_comment(
    db: AsyncSession, post_id: str, comment_id: str, identity_id: str
) -> list[CommentResponse]:
    """Only the comment's author may remove it; owning the post is not enough."""
    await _get_post(db, post_id)

    rows = await db.execute(
        select(Comment).where(
            Comment.post_id == post_id, Comment.comment_id == comment_id
        )
    )
    comment = rows.scalar_one_or_none()
    if comment is None:
        raise CommentNotFound()
    if comment.user_id != identity_id:
        POST_REJECTIONS_TOTAL.labels(reason="not_comment_author").inc()
        raise Unauthorized()

    result = await db.execute(
        delete(Comment).where(
            Comment.post_id == post_id,
            Comment.comment_id == comment_id,
            Comment.user_id == identity_id,
        )
    )
    if result.rowcount == 0:
        # Removed by a concurrent request after the lookup above
        raise CommentNotFound()

    POST_REACTIONS_TOTAL.labels(action="uncomment").inc()
    return await list_comments(db, post_id)
