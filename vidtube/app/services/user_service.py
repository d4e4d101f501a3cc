"""
services/user_service.py: Account updates, channel profile and watch history.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility: only flush here.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidtube.app.errors import AppError, ErrorCode, not_found
from vidtube.app.models.subscription import Subscription
from vidtube.app.models.user import User
from vidtube.app.models.video import Video
from vidtube.app.models.watch_history import WatchHistory
from vidtube.app.services.serializers import iso, serialize_user, serialize_video
from vidtube.app.validators import normalize

# Substrings that identify the violated users column in driver messages:
# SQLite names the column, PostgreSQL the constraint or index and the key.
_UNIQUE_COLUMN_MARKERS = {
    "username": ("users.username", "users_username", "(username)"),
    "email": ("users.email", "users_email", "(email)"),
}


def get_user_or_404(user_id: int, session: Session) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise not_found(ErrorCode.USER_NOT_FOUND, "User", user_id)
    return user


def duplicate_username(username: str) -> AppError:
    return AppError(
        ErrorCode.DUPLICATE_USERNAME,
        f"The username '{username}' is already taken.",
        409,
        field="username",
    )


def duplicate_email(email: str) -> AppError:
    return AppError(
        ErrorCode.DUPLICATE_EMAIL,
        f"The email address '{email}' is already registered.",
        409,
        field="email",
    )


def flush_user_identity(user: User, session: Session) -> None:
    """
    Flushes a new or changed username/email.

    The existence checks before this call can race with a concurrent request;
    the unique constraints on users are the final word. A violation rolls the
    session back and becomes DUPLICATE_USERNAME / DUPLICATE_EMAIL (409).
    Any other integrity error propagates unchanged.
    """
    # Read before rollback: rollback expires a persistent user's attributes.
    username, email = user.username, user.email
    try:
        session.flush()
    except IntegrityError as exc:
        detail = str(exc.orig).lower()
        session.rollback()
        if any(marker in detail for marker in _UNIQUE_COLUMN_MARKERS["username"]):
            raise duplicate_username(username) from exc
        if any(marker in detail for marker in _UNIQUE_COLUMN_MARKERS["email"]):
            raise duplicate_email(email) from exc
        raise


def ensure_email_available(email: str, session: Session, exclude_user_id: int | None = None) -> None:
    stmt = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    if session.execute(stmt).scalar_one_or_none() is not None:
        raise duplicate_email(email)


def update_account(user_id: int, data: dict, session: Session) -> dict:
    """
    Updates full_name and/or email.

    Raises:
      AppError(DUPLICATE_EMAIL, 409): email belongs to another account
    """
    user = get_user_or_404(user_id, session)

    email = data.get("email")
    if email is not None and email != user.email:
        ensure_email_available(email, session, exclude_user_id=user_id)
        user.email = email

    if "full_name" in data:
        user.full_name = data["full_name"].strip()

    flush_user_identity(user, session)
    return serialize_user(user)


def update_avatar(user_id: int, avatar: str, session: Session) -> dict:
    user = get_user_or_404(user_id, session)
    user.avatar = avatar
    session.flush()
    return serialize_user(user)


def update_cover_image(user_id: int, cover_image: str, session: Session) -> dict:
    user = get_user_or_404(user_id, session)
    user.cover_image = cover_image
    session.flush()
    return serialize_user(user)


def get_channel_profile(username: str, viewer_id: int | None, session: Session) -> dict:
    """
    Public channel page for `username`.

    One query joins the user with correlated counts:
      subscribers_count  : users following this channel
      subscribed_to_count: channels this user follows
      videos_count       : public videos
      is_subscribed      : whether the viewer follows this channel
                            (always False for anonymous viewers)

    Raises:
      AppError(CHANNEL_NOT_FOUND, 404)
    """
    subscribers_count = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .scalar_subquery()
    )
    subscribed_to_count = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .scalar_subquery()
    )
    videos_count = (
        select(func.count(Video.id))
        .where(Video.owner_id == User.id, Video.is_public.is_(True))
        .scalar_subquery()
    )
    columns = [
        User,
        subscribers_count.label("subscribers_count"),
        subscribed_to_count.label("subscribed_to_count"),
        videos_count.label("videos_count"),
    ]
    if viewer_id is not None:
        columns.append(
            exists()
            .where(
                Subscription.channel_id == User.id,
                Subscription.subscriber_id == viewer_id,
            )
            .label("is_subscribed")
        )

    row = session.execute(
        select(*columns).where(User.username == normalize(username))
    ).one_or_none()

    if row is None:
        raise AppError(
            ErrorCode.CHANNEL_NOT_FOUND,
            f"Channel '{username}' does not exist.",
            404,
        )

    user = row[0]
    profile = serialize_user(user)
    # Email stays private on the public channel page.
    profile.pop("email")
    profile.update({
        "subscribers_count": row.subscribers_count,
        "subscribed_to_count": row.subscribed_to_count,
        "videos_count": row.videos_count,
        "is_subscribed": bool(row.is_subscribed) if viewer_id is not None else False,
    })
    return profile


def record_view(user_id: int, video_id: int, session: Session) -> None:
    """
    Puts `video_id` at the top of the user's watch history.

    A re-watch moves the existing row to the top instead of adding another.
    watched_at is set in Python so consecutive views inside one second still
    order correctly.
    """
    now = datetime.now(timezone.utc)
    entry = session.execute(
        select(WatchHistory).where(
            WatchHistory.user_id == user_id,
            WatchHistory.video_id == video_id,
        )
    ).scalar_one_or_none()

    if entry is None:
        session.add(WatchHistory(user_id=user_id, video_id=video_id, watched_at=now))
    else:
        entry.watched_at = now
    session.flush()


def get_watch_history(user_id: int, session: Session) -> list[dict]:
    """
    The user's watch history, most recently watched first, each video with
    its owner card. Videos that have since gone private are hidden unless the
    user owns them.
    """
    stmt = (
        select(WatchHistory, Video, User)
        .join(Video, WatchHistory.video_id == Video.id)
        .join(User, Video.owner_id == User.id)
        .where(
            WatchHistory.user_id == user_id,
            or_(Video.is_public.is_(True), Video.owner_id == user_id),
        )
        .order_by(WatchHistory.watched_at.desc(), WatchHistory.id.desc())
    )
    return [
        {
            **serialize_video(video, owner=owner),
            "watched_at": iso(entry.watched_at),
        }
        for entry, video, owner in session.execute(stmt).all()
    ]
