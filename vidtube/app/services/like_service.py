"""
services/like_service.py: Like toggles for videos, comments and tweets.

A toggle creates the like when the caller has none on the target and removes
it otherwise. The target must exist (and, for videos, be visible to the
caller) in both directions.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from vidtube.app.errors import ErrorCode, not_found
from vidtube.app.models.comment import Comment
from vidtube.app.models.like import Like
from vidtube.app.models.tweet import Tweet
from vidtube.app.models.user import User
from vidtube.app.models.video import Video
from vidtube.app.services.serializers import iso, serialize_video
from vidtube.app.services.video_service import get_visible_video_or_404


def _toggle(caller_id: int, column, target_id: int, session: Session) -> bool:
    """Returns True when the like now exists, False when it was removed."""
    existing = session.execute(
        select(Like).where(Like.liked_by_id == caller_id, column == target_id)
    ).scalar_one_or_none()

    if existing is not None:
        session.delete(existing)
        session.flush()
        return False

    session.add(Like(liked_by_id=caller_id, **{column.key: target_id}))
    session.flush()
    return True


def toggle_video_like(video_id: int, caller_id: int, session: Session) -> bool:
    get_visible_video_or_404(video_id, caller_id, session)
    return _toggle(caller_id, Like.video_id, video_id, session)


def toggle_comment_like(comment_id: int, caller_id: int, session: Session) -> bool:
    comment = session.get(Comment, comment_id)
    if comment is None:
        raise not_found(ErrorCode.COMMENT_NOT_FOUND, "Comment", comment_id)
    get_visible_video_or_404(comment.video_id, caller_id, session)
    return _toggle(caller_id, Like.comment_id, comment_id, session)


def toggle_tweet_like(tweet_id: int, caller_id: int, session: Session) -> bool:
    if session.get(Tweet, tweet_id) is None:
        raise not_found(ErrorCode.TWEET_NOT_FOUND, "Tweet", tweet_id)
    return _toggle(caller_id, Like.tweet_id, tweet_id, session)


def get_liked_videos(caller_id: int, session: Session) -> dict:
    """
    Videos the caller liked, most recent like first. Videos that went private
    drop out unless the caller owns them.
    """
    stmt = (
        select(Like, Video, User)
        .join(Video, Like.video_id == Video.id)
        .join(User, Video.owner_id == User.id)
        .where(
            Like.liked_by_id == caller_id,
            (Video.is_public.is_(True)) | (Video.owner_id == caller_id),
        )
        .order_by(Like.created_at.desc(), Like.id.desc())
    )
    liked = [
        {**serialize_video(video, owner=owner), "liked_at": iso(like.created_at)}
        for like, video, owner in session.execute(stmt).all()
    ]
    return {"total_videos": len(liked), "liked_videos": liked}
