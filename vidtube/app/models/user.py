"""
models/user.py: User (credential record) table definition.

No business logic. No imports from services or routes.

username and email are stored trimmed and lowercase; the schemas normalise
them before they reach the service layer, and the UNIQUE constraints are the
last line of defence against duplicates.

password_hash is only ever written through auth_service.set_password().
refresh_token_hash holds the SHA-256 of the single active refresh token,
or NULL when the user has no session.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.app.extensions import db

DEFAULT_AVATAR = "https://example.com/default-avatar.png"
DEFAULT_COVER_IMAGE = "https://example.com/default-cover.png"


class User(db.Model):
    __tablename__ = "users"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(username)) > 0",
            name="ck_users_username_nonempty",
        ),
        CheckConstraint(
            "email LIKE '%@%'",
            name="ck_users_email_format",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    full_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    avatar: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default=DEFAULT_AVATAR,
    )

    cover_image: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default=DEFAULT_COVER_IMAGE,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    refresh_token_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    videos: Mapped[list["Video"]] = relationship(  # noqa: F821
        "Video",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    tweets: Mapped[list["Tweet"]] = relationship(  # noqa: F821
        "Tweet",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    playlists: Mapped[list["Playlist"]] = relationship(  # noqa: F821
        "Playlist",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} username={self.username!r}>"
