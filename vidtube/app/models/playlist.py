"""
models/playlist.py: Playlist and PlaylistVideo table definitions.

PlaylistVideo is the ordered membership of a video in a playlist; a video
appears in a given playlist at most once.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.app.extensions import db


class Playlist(db.Model):
    __tablename__ = "playlists"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(name)) > 0",
            name="ck_playlists_name_nonempty",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

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

    owner: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="playlists",
    )

    entries: Mapped[list["PlaylistVideo"]] = relationship(
        "PlaylistVideo",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="[PlaylistVideo.added_at.desc(), PlaylistVideo.id.desc()]",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Playlist id={self.id} name={self.name!r}>"


class PlaylistVideo(db.Model):
    __tablename__ = "playlist_videos"

    __table_args__ = (
        UniqueConstraint("playlist_id", "video_id", name="uq_playlist_videos_pair"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    playlist_id: Mapped[int] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    playlist: Mapped["Playlist"] = relationship(
        "Playlist",
        back_populates="entries",
    )

    video: Mapped["Video"] = relationship(  # noqa: F821
        "Video",
        back_populates="playlist_entries",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<PlaylistVideo playlist_id={self.playlist_id} video_id={self.video_id}>"
