"""
services/playlist_service.py: Playlists and their video entries.

Anyone may read a playlist; only its owner may change it. Private videos in
a playlist are listed only to the video's owner.
"""

from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from vidtube.app.errors import AppError, ErrorCode, forbidden, not_found
from vidtube.app.models.playlist import Playlist, PlaylistVideo
from vidtube.app.models.user import User
from vidtube.app.models.video import Video
from vidtube.app.services.serializers import iso, serialize_owner, serialize_video
from vidtube.app.services.user_service import get_user_or_404
from vidtube.app.services.video_service import get_visible_video_or_404


def _serialize_playlist(playlist: Playlist, **extra) -> dict:
    data = {
        "id": playlist.id,
        "owner_id": playlist.owner_id,
        "name": playlist.name,
        "description": playlist.description,
        "created_at": iso(playlist.created_at),
        "updated_at": iso(playlist.updated_at),
    }
    data.update(extra)
    return data


def _visible_to(viewer_id: int | None):
    if viewer_id is None:
        return Video.is_public.is_(True)
    return or_(Video.is_public.is_(True), Video.owner_id == viewer_id)


def _get_playlist_or_404(playlist_id: int, session: Session) -> Playlist:
    playlist = session.get(Playlist, playlist_id)
    if playlist is None:
        raise not_found(ErrorCode.PLAYLIST_NOT_FOUND, "Playlist", playlist_id)
    return playlist


def _get_own_playlist(playlist_id: int, caller_id: int, session: Session) -> Playlist:
    playlist = _get_playlist_or_404(playlist_id, session)
    if playlist.owner_id != caller_id:
        raise forbidden("Only the owner may modify this playlist.")
    return playlist


def create_playlist(owner_id: int, name: str, description: str, session: Session) -> dict:
    playlist = Playlist(owner_id=owner_id, name=name.strip(), description=description.strip())
    session.add(playlist)
    session.flush()
    return _serialize_playlist(playlist, total_videos=0)


def get_user_playlists(user_id: int, viewer_id: int | None, session: Session) -> list[dict]:
    """
    The user's playlists, newest first. total_videos counts only the entries
    the viewer could see in get_playlist().
    """
    get_user_or_404(user_id, session)

    total_videos = (
        select(func.count(PlaylistVideo.id))
        .join(Video, PlaylistVideo.video_id == Video.id)
        .where(PlaylistVideo.playlist_id == Playlist.id, _visible_to(viewer_id))
        .scalar_subquery()
    )
    stmt = (
        select(Playlist, total_videos.label("total_videos"))
        .where(Playlist.owner_id == user_id)
        .order_by(Playlist.created_at.desc(), Playlist.id.desc())
    )
    return [
        _serialize_playlist(row[0], total_videos=row.total_videos)
        for row in session.execute(stmt).all()
    ]


def get_playlist(playlist_id: int, viewer_id: int | None, session: Session) -> dict:
    """The playlist with its owner card and videos, most recently added first."""
    playlist = _get_playlist_or_404(playlist_id, session)

    stmt = (
        select(Video, User)
        .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
        .join(User, Video.owner_id == User.id)
        .where(PlaylistVideo.playlist_id == playlist_id, _visible_to(viewer_id))
        .order_by(PlaylistVideo.added_at.desc(), PlaylistVideo.id.desc())
    )

    videos = [serialize_video(video, owner=owner) for video, owner in session.execute(stmt).all()]
    return _serialize_playlist(
        playlist,
        owner=serialize_owner(playlist.owner),
        total_videos=len(videos),
        videos=videos,
    )


def update_playlist(playlist_id: int, caller_id: int, data: dict, session: Session) -> dict:
    playlist = _get_own_playlist(playlist_id, caller_id, session)
    if "name" in data:
        playlist.name = data["name"].strip()
    if "description" in data:
        playlist.description = data["description"].strip()
    session.flush()
    return _serialize_playlist(playlist)


def delete_playlist(playlist_id: int, caller_id: int, session: Session) -> None:
    playlist = _get_own_playlist(playlist_id, caller_id, session)
    session.delete(playlist)
    session.flush()


def add_video_to_playlist(
        playlist_id: int,
        video_id: int,
        caller_id: int,
        session: Session,
) -> dict:
    """
    Adds the video to the playlist. Adding a video that is already there is a
    no-op reported as already_present=True.
    """
    _get_own_playlist(playlist_id, caller_id, session)
    get_visible_video_or_404(video_id, caller_id, session)

    existing = session.execute(
        select(PlaylistVideo.id).where(
            PlaylistVideo.playlist_id == playlist_id,
            PlaylistVideo.video_id == video_id,
        )
    ).scalar_one_or_none()

    if existing is None:
        session.add(PlaylistVideo(playlist_id=playlist_id, video_id=video_id))
        session.flush()

    return {
        "playlist_id": playlist_id,
        "video_id": video_id,
        "already_present": existing is not None,
    }


def remove_video_from_playlist(
        playlist_id: int,
        video_id: int,
        caller_id: int,
        session: Session,
) -> None:
    """
    Raises:
      AppError(VIDEO_NOT_IN_PLAYLIST, 404)
    """
    _get_own_playlist(playlist_id, caller_id, session)

    entry = session.execute(
        select(PlaylistVideo).where(
            PlaylistVideo.playlist_id == playlist_id,
            PlaylistVideo.video_id == video_id,
        )
    ).scalar_one_or_none()
    if entry is None:
        raise AppError(
            ErrorCode.VIDEO_NOT_IN_PLAYLIST,
            f"Video {video_id} is not in playlist {playlist_id}.",
            404,
        )

    session.delete(entry)
    session.flush()
