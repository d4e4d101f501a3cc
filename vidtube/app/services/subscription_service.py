"""
services/subscription_service.py: Channel subscriptions.

A channel is just a user. One row per (subscriber, channel) pair; a user can
never subscribe to themselves (checked here, and by a DB CHECK constraint).
"""

from __future__ import annotations

import logging

from sqlalchemy import exists, select
from sqlalchemy.orm import Session, aliased

from vidtube.app.errors import AppError, ErrorCode, not_found
from vidtube.app.models.subscription import Subscription
from vidtube.app.models.user import User
from vidtube.app.services.serializers import iso, serialize_owner

logger = logging.getLogger(__name__)


def toggle_subscription(channel_id: int, caller_id: int, session: Session) -> bool:
    """
    Subscribes the caller to `channel_id`, or unsubscribes if already
    subscribed. Returns True when the subscription now exists.

    Raises:
      AppError(SELF_SUBSCRIPTION, 400)
      AppError(CHANNEL_NOT_FOUND, 404)
    """
    if channel_id == caller_id:
        raise AppError(
            ErrorCode.SELF_SUBSCRIPTION,
            "You cannot subscribe to your own channel.",
            400,
        )
    if session.get(User, channel_id) is None:
        raise not_found(ErrorCode.CHANNEL_NOT_FOUND, "Channel", channel_id)

    existing = session.execute(
        select(Subscription).where(
            Subscription.subscriber_id == caller_id,
            Subscription.channel_id == channel_id,
        )
    ).scalar_one_or_none()

    if existing is not None:
        session.delete(existing)
        session.flush()
        logger.info("User id=%s unsubscribed from channel id=%s", caller_id, channel_id)
        return False

    session.add(Subscription(subscriber_id=caller_id, channel_id=channel_id))
    session.flush()
    logger.info("User id=%s subscribed to channel id=%s", caller_id, channel_id)
    return True


def get_channel_subscribers(channel_id: int, viewer_id: int, session: Session) -> dict:
    """
    Everyone subscribed to `channel_id`. is_subscribed on each entry says
    whether the viewer is subscribed to that subscriber's own channel.
    """
    if session.get(User, channel_id) is None:
        raise not_found(ErrorCode.CHANNEL_NOT_FOUND, "Channel", channel_id)

    follow_back = aliased(Subscription)
    is_subscribed = (
        exists()
        .where(
            follow_back.subscriber_id == viewer_id,
            follow_back.channel_id == User.id,
        )
        .label("is_subscribed")
    )
    stmt = (
        select(User, is_subscribed)
        .join(Subscription, Subscription.subscriber_id == User.id)
        .where(Subscription.channel_id == channel_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
    )
    subscribers = [
        {**serialize_owner(row[0]), "is_subscribed": bool(row.is_subscribed)}
        for row in session.execute(stmt).all()
    ]
    return {"total_subscribers": len(subscribers), "subscribers": subscribers}


def get_subscribed_channels(subscriber_id: int, session: Session) -> dict:
    """Channels `subscriber_id` follows, most recent subscription first."""
    if session.get(User, subscriber_id) is None:
        raise not_found(ErrorCode.USER_NOT_FOUND, "User", subscriber_id)

    stmt = (
        select(Subscription, User)
        .join(User, Subscription.channel_id == User.id)
        .where(Subscription.subscriber_id == subscriber_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
    )
    channels = [
        {**serialize_owner(channel), "subscribed_at": iso(sub.created_at)}
        for sub, channel in session.execute(stmt).all()
    ]
    return {"total_channels": len(channels), "channels": channels}
