"""
services/serializers.py: ORM row → plain dict helpers shared by services.

Pure data-shaping. No DB access, no logic. Timestamps are ISO-8601 strings.

serialize_user() is the sanitized user record: password_hash and
refresh_token_hash are never part of any response.
"""

from __future__ import annotations

from datetime import datetime

from vidtube.app.models.user import DEFAULT_AVATAR

DELETED_USER = {
    "id": None,
    "username": "Deleted User",
    "full_name": "Deleted User",
    "avatar": DEFAULT_AVATAR,
}


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_user(user) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "full_name": user.full_name,
        "avatar": user.avatar,
        "cover_image": user.cover_image,
        "created_at": iso(user.created_at),
        "updated_at": iso(user.updated_at),
    }


def serialize_owner(user) -> dict:
    """Public card for a user shown next to content they own."""
    if user is None:
        return dict(DELETED_USER)
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "avatar": user.avatar,
    }


def serialize_video(video, owner=None) -> dict:
    data = {
        "id": video.id,
        "owner_id": video.owner_id,
        "title": video.title,
        "description": video.description,
        "video_file": video.video_file,
        "thumbnail": video.thumbnail,
        "duration": video.duration,
        "views": video.views,
        "is_public": video.is_public,
        "created_at": iso(video.created_at),
        "updated_at": iso(video.updated_at),
    }
    if owner is not None:
        data["owner"] = serialize_owner(owner)
    return data
