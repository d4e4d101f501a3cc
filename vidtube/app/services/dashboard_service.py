"""
services/dashboard_service.py: Channel statistics for the signed-in creator.

Totals are computed with aggregate queries, never by loading rows into
Python. Private videos count toward every total: the dashboard is the
owner's own view.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidtube.app.errors import ErrorCode, not_found
from vidtube.app.models.like import Like
from vidtube.app.models.subscription import Subscription
from vidtube.app.models.user import User
from vidtube.app.models.video import Video
from vidtube.app.services.serializers import serialize_owner, serialize_video


def _get_channel_or_404(user_id: int, session: Session) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise not_found(ErrorCode.USER_NOT_FOUND, "User", user_id)
    return user


def get_channel_stats(user_id: int, session: Session) -> dict:
    channel = _get_channel_or_404(user_id, session)

    total_subscribers = session.execute(
        select(func.count(Subscription.id)).where(Subscription.channel_id == user_id)
    ).scalar_one()

    total_videos, total_views = session.execute(
        select(func.count(Video.id), func.coalesce(func.sum(Video.views), 0))
        .where(Video.owner_id == user_id)
    ).one()

    total_likes = session.execute(
        select(func.count(Like.id))
        .join(Video, Like.video_id == Video.id)
        .where(Video.owner_id == user_id)
    ).scalar_one()

    return {
        "channel": serialize_owner(channel),
        "total_subscribers": total_subscribers,
        "total_videos": total_videos,
        "total_views": int(total_views),
        "total_likes": total_likes,
    }


def get_channel_videos(user_id: int, session: Session) -> dict:
    """All of the caller's videos, newest first, each with its like count."""
    channel = _get_channel_or_404(user_id, session)

    likes_count = (
        select(func.count(Like.id))
        .where(Like.video_id == Video.id)
        .scalar_subquery()
    )
    stmt = (
        select(Video, likes_count.label("likes_count"))
        .where(Video.owner_id == user_id)
        .order_by(Video.created_at.desc(), Video.id.desc())
    )
    return {
        "channel": {"username": channel.username, "avatar": channel.avatar},
        "videos": [
            {**serialize_video(row[0]), "likes_count": row.likes_count}
            for row in session.execute(stmt).all()
        ],
    }
