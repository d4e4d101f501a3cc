"""
services/comment_service.py: Comments on videos.

Comments can only be read or written on videos the caller can see (public,
or their own). Editing and deleting a comment is limited to its author.
A comment whose author account is gone keeps its text and shows the
"Deleted User" card.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidtube.app.errors import ErrorCode, forbidden, not_found
from vidtube.app.models.comment import Comment
from vidtube.app.models.like import Like
from vidtube.app.models.user import User
from vidtube.app.services.pagination import paginate
from vidtube.app.services.serializers import iso, serialize_owner
from vidtube.app.services.video_service import get_visible_video_or_404


def _serialize_comment(comment: Comment, owner: User | None, likes_count: int = 0) -> dict:
    return {
        "id": comment.id,
        "video_id": comment.video_id,
        "content": comment.content,
        "owner": serialize_owner(owner),
        "likes_count": likes_count,
        "created_at": iso(comment.created_at),
        "updated_at": iso(comment.updated_at),
    }


def _get_own_comment(comment_id: int, caller_id: int, session: Session, action: str) -> Comment:
    comment = session.get(Comment, comment_id)
    if comment is None:
        raise not_found(ErrorCode.COMMENT_NOT_FOUND, "Comment", comment_id)
    if comment.owner_id != caller_id:
        raise forbidden(f"Only the author may {action} this comment.")
    return comment


def list_video_comments(
        video_id: int,
        viewer_id: int | None,
        page: int,
        limit: int,
        session: Session,
) -> dict:
    """Newest first. The owner join is an outer join so orphaned comments still list."""
    get_visible_video_or_404(video_id, viewer_id, session)

    likes_count = (
        select(func.count(Like.id))
        .where(Like.comment_id == Comment.id)
        .scalar_subquery()
    )
    stmt = (
        select(Comment, User, likes_count.label("likes_count"))
        .outerjoin(User, Comment.owner_id == User.id)
        .where(Comment.video_id == video_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    return paginate(
        stmt, page, limit, session,
        lambda row: _serialize_comment(row[0], row[1], row.likes_count),
    )


def add_comment(video_id: int, caller_id: int, content: str, session: Session) -> dict:
    get_visible_video_or_404(video_id, caller_id, session)

    comment = Comment(video_id=video_id, owner_id=caller_id, content=content.strip())
    session.add(comment)
    session.flush()
    return _serialize_comment(comment, session.get(User, caller_id))


def update_comment(comment_id: int, caller_id: int, content: str, session: Session) -> dict:
    """
    Raises:
      AppError(COMMENT_NOT_FOUND, 404), AppError(FORBIDDEN, 403)
    """
    comment = _get_own_comment(comment_id, caller_id, session, "edit")
    comment.content = content.strip()
    session.flush()

    likes_count = session.execute(
        select(func.count(Like.id)).where(Like.comment_id == comment.id)
    ).scalar_one()
    return _serialize_comment(comment, comment.owner, likes_count)


def delete_comment(comment_id: int, caller_id: int, session: Session) -> None:
    comment = _get_own_comment(comment_id, caller_id, session, "delete")
    session.delete(comment)
    session.flush()
