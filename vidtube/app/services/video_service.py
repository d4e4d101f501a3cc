"""
services/video_service.py: Video business logic.

Visibility rules:
  - Public videos are visible to everyone.
  - Private videos are visible only to their owner; to anyone else they do
    not exist (VIDEO_NOT_FOUND, 404), so private ids cannot be probed.

Authorization rules:
  - Update, delete, toggle-publish: owner only (FORBIDDEN, 403).

Layer rules:
  - No Flask imports. Receives plain ints and dicts; returns dicts or raises
    AppError.
  - Commits are the route's responsibility: only flush here.
"""

from __future__ import annotations

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from vidtube.app.errors import ErrorCode, forbidden, not_found
from vidtube.app.models.like import Like
from vidtube.app.models.user import User
from vidtube.app.models.video import Video
from vidtube.app.services import user_service
from vidtube.app.services.pagination import paginate
from vidtube.app.services.serializers import serialize_video


# ── Private helpers ────────────────────────────────────────────────────────

def _get_video_or_404(video_id: int, session: Session) -> Video:
    video = session.get(Video, video_id)
    if video is None:
        raise not_found(ErrorCode.VIDEO_NOT_FOUND, "Video", video_id)
    return video


def get_visible_video_or_404(video_id: int, viewer_id: int | None, session: Session) -> Video:
    """Returns the video if the viewer may see it, else VIDEO_NOT_FOUND (404)."""
    video = _get_video_or_404(video_id, session)
    if not video.is_public and video.owner_id != viewer_id:
        raise not_found(ErrorCode.VIDEO_NOT_FOUND, "Video", video_id)
    return video


def _get_owned_video(video_id: int, caller_id: int, session: Session, action: str) -> Video:
    video = _get_video_or_404(video_id, session)
    if video.owner_id != caller_id:
        raise forbidden(f"Only the owner may {action} this video.")
    return video


def _order_clause(sort_by: str, sort_type: str):
    column = getattr(Video, sort_by)
    if sort_type == "asc":
        return column.asc(), Video.id.asc()
    return column.desc(), Video.id.desc()


def _listing_stmt(query: str | None, sort_by: str, sort_type: str):
    stmt = select(Video, User).join(User, Video.owner_id == User.id)
    if query:
        stmt = stmt.where(or_(
            Video.title.icontains(query, autoescape=True),
            Video.description.icontains(query, autoescape=True),
        ))
    return stmt.order_by(*_order_clause(sort_by, sort_type))


def _shape_listing_row(row) -> dict:
    video, owner = row
    return serialize_video(video, owner=owner)


# ── Public service functions ───────────────────────────────────────────────

def list_videos(
        query: str | None,
        sort_by: str,
        sort_type: str,
        page: int,
        limit: int,
        session: Session,
) -> dict:
    """
    Public videos, optionally filtered by a case-insensitive substring of
    title or description. An empty result is an empty page, not a 404.
    """
    stmt = _listing_stmt(query, sort_by, sort_type).where(Video.is_public.is_(True))
    return paginate(stmt, page, limit, session, _shape_listing_row)


def list_user_videos(
        user_id: int,
        viewer_id: int | None,
        query: str | None,
        sort_by: str,
        sort_type: str,
        page: int,
        limit: int,
        session: Session,
) -> dict:
    """
    One user's videos. Private videos are included only when the viewer is
    that user.

    Raises:
      AppError(USER_NOT_FOUND, 404)
    """
    if session.get(User, user_id) is None:
        raise not_found(ErrorCode.USER_NOT_FOUND, "User", user_id)

    stmt = _listing_stmt(query, sort_by, sort_type).where(Video.owner_id == user_id)
    if viewer_id != user_id:
        stmt = stmt.where(Video.is_public.is_(True))
    return paginate(stmt, page, limit, session, _shape_listing_row)


def publish_video(owner_id: int, data: dict, session: Session) -> dict:
    video = Video(
        owner_id=owner_id,
        title=data["title"].strip(),
        description=data["description"].strip(),
        video_file=data["video_file"],
        thumbnail=data["thumbnail"],
        duration=data["duration"],
        is_public=data.get("is_public", True),
    )
    session.add(video)
    session.flush()
    return serialize_video(video)


def get_video(video_id: int, viewer_id: int | None, session: Session) -> dict:
    """
    Returns one video with its owner card, like count and whether the viewer
    liked it.

    When an authenticated viewer other than the owner opens the video, the
    view counter is incremented atomically in SQL and the video goes to the
    top of the viewer's watch history.
    """
    video = get_visible_video_or_404(video_id, viewer_id, session)

    if viewer_id is not None and viewer_id != video.owner_id:
        session.execute(
            update(Video)
            .where(Video.id == video_id)
            .values(views=Video.views + 1)
        )
        user_service.record_view(viewer_id, video_id, session)
        session.refresh(video)

    likes_count = session.execute(
        select(func.count(Like.id)).where(Like.video_id == video_id)
    ).scalar_one()
    is_liked = False
    if viewer_id is not None:
        is_liked = session.execute(
            select(Like.id).where(Like.video_id == video_id, Like.liked_by_id == viewer_id)
        ).scalar_one_or_none() is not None

    return {
        **serialize_video(video, owner=video.owner),
        "likes_count": likes_count,
        "is_liked": is_liked,
    }


def update_video(video_id: int, caller_id: int, data: dict, session: Session) -> dict:
    """
    Updates title, description and/or thumbnail.

    Raises:
      AppError(VIDEO_NOT_FOUND, 404), AppError(FORBIDDEN, 403)
    """
    video = _get_owned_video(video_id, caller_id, session, "update")

    if "title" in data:
        video.title = data["title"].strip()
    if "description" in data:
        video.description = data["description"].strip()
    if "thumbnail" in data:
        video.thumbnail = data["thumbnail"]

    session.flush()
    return serialize_video(video)


def delete_video(video_id: int, caller_id: int, session: Session) -> None:
    """
    Deletes the video. Comments, likes, playlist entries and watch-history
    rows go with it (ORM cascades on Video).
    """
    video = _get_owned_video(video_id, caller_id, session, "delete")
    session.delete(video)
    session.flush()


def toggle_publish_status(video_id: int, caller_id: int, session: Session) -> dict:
    video = _get_owned_video(video_id, caller_id, session, "publish or unpublish")
    video.is_public = not video.is_public
    session.flush()
    return serialize_video(video)
