import logging
import math
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Response
from sqlmodel import func, or_, select

from db import SessionDep
from models import ForumPost, User, utcnow
from schemas import ForumPostCreate, ForumPostUpdate
from .auth import CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["forums"])

EXCERPT_LENGTH = 200

SORT_ORDERS = {
    "latest": (ForumPost.created_at.desc(),),
    "popular": (
        ForumPost.like_count.desc(),
        ForumPost.reply_count.desc(),
        ForumPost.created_at.desc(),
    ),
    "most_replies": (ForumPost.reply_count.desc(), ForumPost.created_at.desc()),
    "pinned": (ForumPost.is_pinned.desc(), ForumPost.created_at.desc()),
}


def _join_tags(tags):
    return ",".join(tags) if tags else None


def _split_tags(tags: Optional[str]) -> list:
    return tags.split(",") if tags else []


def _author(session: SessionDep, post: ForumPost) -> Optional[dict]:
    if post.is_anonymous:
        return None
    author = session.get(User, post.author_id)
    if author is None:
        return None
    return {"id": author.id, "name": author.name, "avatar": author.avatar}


def serialize_post(session: SessionDep, post: ForumPost, excerpt: bool = False) -> dict:
    content = post.content
    if excerpt and len(content) > EXCERPT_LENGTH:
        content = content[:EXCERPT_LENGTH] + "..."

    return {
        "id": post.id,
        "title": post.title,
        "content": content,
        "category": post.category,
        "is_anonymous": post.is_anonymous,
        "is_pinned": post.is_pinned,
        "is_locked": post.is_locked,
        "author": _author(session, post),
        "reply_count": post.reply_count,
        "view_count": post.view_count,
        "like_count": post.like_count,
        "tags": _split_tags(post.tags),
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


def _own_post(session: SessionDep, post_id: int, user: User) -> ForumPost:
    post = session.get(ForumPost, post_id)
    if post is None or post.is_deleted:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.author_id != user.id:
        raise HTTPException(status_code=403, detail="Only the author can change this post")
    return post


@router.post("/")
def create_post(post_in: ForumPostCreate, session: SessionDep, current: CurrentUserDep):
    post = ForumPost(
        author_id=current.id,
        title=post_in.title,
        content=post_in.content,
        category=post_in.category,
        is_anonymous=post_in.is_anonymous,
        tags=_join_tags(post_in.tags),
        meta={
            "word_count": len(post_in.content.split()),
            "last_activity": utcnow().isoformat(),
        },
    )
    session.add(post)
    session.commit()
    session.refresh(post)

    logger.info(f"User {current.id} created forum post {post.id} in {post.category}")
    return {"success": True, "post": serialize_post(session, post)}


@router.get("/")
def list_posts(
    session: SessionDep,
    category: Optional[str] = None,
    search: Optional[str] = None,
    tags: Optional[str] = None,
    sort_by: str = Query(default="latest", pattern="^(latest|popular|most_replies|pinned)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
):
    """
    Paginated post listing with short excerpts. Authors of anonymous
    posts are never exposed.
    """
    conditions = [ForumPost.is_deleted == False]  # noqa: E712

    if category and category != "all":
        conditions.append(ForumPost.category == category)

    if search:
        pattern = f"%{search.lower()}%"
        conditions.append(
            or_(
                func.lower(ForumPost.title).like(pattern),
                func.lower(ForumPost.content).like(pattern),
            )
        )

    if tags:
        # only the first tag is matched
        first_tag = tags.split(",")[0].strip().lower()
        conditions.append(func.lower(ForumPost.tags).like(f"%{first_tag}%"))

    total = session.exec(select(func.count(ForumPost.id)).where(*conditions)).one()

    posts = session.exec(
        select(ForumPost)
        .where(*conditions)
        .order_by(*SORT_ORDERS[sort_by])
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {
        "posts": [serialize_post(session, p, excerpt=True) for p in posts],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    }


@router.put("/{post_id}")
def update_post(
    post_id: int,
    update: ForumPostUpdate,
    session: SessionDep,
    current: CurrentUserDep,
):
    post = _own_post(session, post_id, current)

    if update.title:
        post.title = update.title
    if update.content:
        post.content = update.content
    if update.is_anonymous is not None:
        post.is_anonymous = update.is_anonymous
    if "tags" in update.model_fields_set:
        post.tags = _join_tags(update.tags)
    post.updated_at = utcnow()

    session.add(post)
    session.commit()
    session.refresh(post)
    return {"success": True, "post": serialize_post(session, post)}


@router.delete("/{post_id}", status_code=204)
def delete_post(post_id: int, session: SessionDep, current: CurrentUserDep):
    post = _own_post(session, post_id, current)
    post.is_deleted = True
    post.deleted_at = utcnow()
    session.add(post)
    session.commit()

    logger.info(f"User {current.id} deleted forum post {post.id}")
    return Response(status_code=204)
