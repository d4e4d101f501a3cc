"""
models/like.py: Like table definition.

A like targets exactly one of: a video, a comment, or a tweet. The CHECK
constraint enforces that; the three UNIQUE constraints stop a user from
liking the same target twice (NULLs never collide, so each constraint only
bites for its own target kind).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.app.extensions import db


class Like(db.Model):
    __tablename__ = "likes"

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_likes_exactly_one_target",
        ),
        UniqueConstraint("liked_by_id", "video_id", name="uq_likes_user_video"),
        UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_user_comment"),
        UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_user_tweet"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    liked_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    video_id: Mapped[int | None] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    comment_id: Mapped[int | None] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    tweet_id: Mapped[int | None] = mapped_column(
        ForeignKey("tweets.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    video: Mapped["Video | None"] = relationship(  # noqa: F821
        "Video",
        back_populates="likes",
    )

    comment: Mapped["Comment | None"] = relationship(  # noqa: F821
        "Comment",
        back_populates="likes",
    )

    tweet: Mapped["Tweet | None"] = relationship(  # noqa: F821
        "Tweet",
        back_populates="likes",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Like id={self.id} liked_by_id={self.liked_by_id} "
            f"video_id={self.video_id} comment_id={self.comment_id} "
            f"tweet_id={self.tweet_id}>"
        )
