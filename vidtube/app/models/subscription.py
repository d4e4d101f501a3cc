"""
models/subscription.py: Subscription junction table definition.

subscriber_id follows channel_id. Both are users.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.app.extensions import db


class Subscription(db.Model):
    __tablename__ = "subscriptions"

    __table_args__ = (
        UniqueConstraint(
            "subscriber_id",
            "channel_id",
            name="uq_subscriptions_subscriber_channel",
        ),
        CheckConstraint(
            "subscriber_id <> channel_id",
            name="ck_subscriptions_not_self",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    subscriber_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    channel_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    subscriber: Mapped["User"] = relationship(  # noqa: F821
        "User",
        foreign_keys=[subscriber_id],
    )

    channel: Mapped["User"] = relationship(  # noqa: F821
        "User",
        foreign_keys=[channel_id],
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Subscription id={self.id} "
            f"subscriber_id={self.subscriber_id} "
            f"channel_id={self.channel_id}>"
        )
