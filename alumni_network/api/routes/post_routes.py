"""
Post Routes (member feed)

GET /posts - Feed, newest first
POST /posts - Publish text and/or media
DELETE /posts?id= - Delete own post
POST /posts/{post_id}/like - Toggle like
GET /posts/{post_id}/comments - Comments, oldest first
POST /posts/{post_id}/comments - Add a comment
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import Post, PostComment, PostLike, User
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    CommentCreate, CommentResponse, LikeResponse, MediaType, PostCreate, PostResponse, UserSummary
)
from alumni_network.utils.validation import clamp_limit, is_blank, parse_id, require_choice

router = APIRouter(prefix="/posts", tags=["Posts"])


def _with_author(model, row, author):
    item = model.model_validate(row)
    item.author = UserSummary.model_validate(author) if author else None
    return item


def _post_or_404(db, post_id: int) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise not_found("Post not found", "POST_NOT_FOUND")
    return post


@router.get("")
async def get_posts(
    user_id: Optional[str] = Query(None, alias="userId"),
    limit: int = Query(10),
    offset: int = Query(0, ge=0)
):
    with get_db_session() as db:
        query = db.query(Post, User).outerjoin(User, User.id == Post.user_id)
        if user_id:
            query = query.filter(Post.user_id == user_id)

        rows = (
            query.order_by(Post.created_at.desc(), Post.id.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 50))
            .all()
        )
        return [_with_author(PostResponse, post, author) for post, author in rows]


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(payload: PostCreate, user: dict = Depends(get_current_user)):
    """A post needs content, media, or both."""
    if is_blank(payload.content) and is_blank(payload.media_data_url):
        raise bad_request("Provide content or media", "MISSING_CONTENT")
    if payload.media_type is not None:
        require_choice(payload.media_type, MediaType, "INVALID_MEDIA_TYPE", "mediaType")

    with get_db_session() as db:
        post = Post(
            user_id=user["id"],
            content=payload.content or None,
            media_url=payload.media_data_url or None,
            media_type=payload.media_type or None,
            likes_count=0,
            comments_count=0
        )
        db.add(post)
        db.flush()
        author = db.query(User).filter(User.id == user["id"]).first()
        return _with_author(PostResponse, post, author)


@router.delete("")
async def delete_post(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    post_id = parse_id(id)
    with get_db_session() as db:
        post = _post_or_404(db, post_id)
        if post.user_id != user["id"]:
            raise forbidden("Unauthorized to delete this post", "UNAUTHORIZED")

        deleted = PostResponse.model_validate(post)
        db.delete(post)

    return {"message": "Post deleted successfully", "post": deleted}


@router.post("/{post_id}/like", response_model=LikeResponse)
async def toggle_like(post_id: int, user: dict = Depends(get_current_user)):
    """Like the post, or remove the caller's like if already liked."""
    with get_db_session() as db:
        post = _post_or_404(db, post_id)
        like = (
            db.query(PostLike)
            .filter(PostLike.post_id == post_id, PostLike.user_id == user["id"])
            .first()
        )

        if like:
            db.delete(like)
            post.likes_count = max(0, (post.likes_count or 0) - 1)
            liked = False
        else:
            db.add(PostLike(post_id=post_id, user_id=user["id"]))
            post.likes_count = (post.likes_count or 0) + 1
            liked = True

        db.flush()
        return LikeResponse(liked=liked, likes_count=post.likes_count)


@router.get("/{post_id}/comments")
async def get_comments(post_id: int, limit: int = Query(50), offset: int = Query(0, ge=0)):
    with get_db_session() as db:
        _post_or_404(db, post_id)
        rows = (
            db.query(PostComment, User)
            .outerjoin(User, User.id == PostComment.user_id)
            .filter(PostComment.post_id == post_id)
            .order_by(PostComment.created_at.asc(), PostComment.id.asc())
            .offset(offset)
            .limit(clamp_limit(limit, 200))
            .all()
        )
        return [_with_author(CommentResponse, comment, author) for comment, author in rows]


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(post_id: int, payload: CommentCreate, user: dict = Depends(get_current_user)):
    if not isinstance(payload.text, str) or is_blank(payload.text):
        raise bad_request("Comment text is required", "MISSING_TEXT")

    with get_db_session() as db:
        post = _post_or_404(db, post_id)
        comment = PostComment(post_id=post_id, user_id=user["id"], text=payload.text.strip())
        db.add(comment)
        post.comments_count = (post.comments_count or 0) + 1
        db.flush()

        author = db.query(User).filter(User.id == user["id"]).first()
        return _with_author(CommentResponse, comment, author)
