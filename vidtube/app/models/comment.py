"""
models/comment.py: Comment table definition.

No business logic. No imports from services or routes.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.app.extensions import db


class Comment(db.Model):
    __tablename__ = "comments"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(content)) > 0",
            name="ck_comments_content_nonempty",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # SET NULL keeps the thread readable after an account is removed;
    # the API renders such comments as "Deleted User".
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

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

    video: Mapped["Video"] = relationship(  # noqa: F821
        "Video",
        back_populates="comments",
    )

    owner: Mapped["User | None"] = relationship("User")  # noqa: F821

    likes: Mapped[list["Like"]] = relationship(  # noqa: F821
        "Like",
        back_populates="comment",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Comment id={self.id} video_id={self.video_id} owner_id={self.owner_id}>"
