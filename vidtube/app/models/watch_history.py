"""
models/watch_history.py: WatchHistory table definition.

One row per (user, video). Re-watching bumps watched_at instead of adding
a second row, so the history reads as "most recently watched first".
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.app.extensions import db


class WatchHistory(db.Model):
    __tablename__ = "watch_history"

    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_watch_history_user_video"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    watched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    video: Mapped["Video"] = relationship(  # noqa: F821
        "Video",
        back_populates="history_entries",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<WatchHistory user_id={self.user_id} video_id={self.video_id}>"
