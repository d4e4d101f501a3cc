"""
models/video.py: Video table definition.

video_file and thumbnail hold URLs of media already hosted elsewhere.
Deleting a video removes its comments, likes, playlist entries and watch
history rows through ORM cascades.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.app.extensions import db


class Video(db.Model):
    __tablename__ = "videos"

    __table_args__ = (
        CheckConstraint("duration > 0", name="ck_videos_duration_positive"),
        CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    video_file: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(500), nullable=False)

    # Seconds.
    duration: Mapped[int] = mapped_column(Integer, nullable=False)

    views: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )

    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
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

    owner: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="videos",
    )

    comments: Mapped[list["Comment"]] = relationship(  # noqa: F821
        "Comment",
        back_populates="video",
        cascade="all, delete-orphan",
    )

    likes: Mapped[list["Like"]] = relationship(  # noqa: F821
        "Like",
        back_populates="video",
        cascade="all, delete-orphan",
    )

    playlist_entries: Mapped[list["PlaylistVideo"]] = relationship(  # noqa: F821
        "PlaylistVideo",
        back_populates="video",
        cascade="all, delete-orphan",
    )

    history_entries: Mapped[list["WatchHistory"]] = relationship(  # noqa: F821
        "WatchHistory",
        back_populates="video",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Video id={self.id} owner_id={self.owner_id} title={self.title!r}>"
