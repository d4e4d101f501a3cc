"""
services/tweet_service.py: Short text posts on a user's channel.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vidtube.app.errors import ErrorCode, forbidden, not_found
from vidtube.app.models.like import Like
from vidtube.app.models.tweet import Tweet
from vidtube.app.models.user import User
from vidtube.app.services.serializers import iso, serialize_owner


def _serialize_tweet(tweet: Tweet, owner: User, likes_count: int = 0) -> dict:
    return {
        "id": tweet.id,
        "content": tweet.content,
        "owner": serialize_owner(owner),
        "likes_count": likes_count,
        "created_at": iso(tweet.created_at),
        "updated_at": iso(tweet.updated_at),
    }


def _get_own_tweet(tweet_id: int, caller_id: int, session: Session, action: str) -> Tweet:
    tweet = session.get(Tweet, tweet_id)
    if tweet is None:
        raise not_found(ErrorCode.TWEET_NOT_FOUND, "Tweet", tweet_id)
    if tweet.owner_id != caller_id:
        raise forbidden(f"Only the author may {action} this tweet.")
    return tweet


def create_tweet(owner_id: int, content: str, session: Session) -> dict:
    tweet = Tweet(owner_id=owner_id, content=content.strip())
    session.add(tweet)
    session.flush()
    return _serialize_tweet(tweet, tweet.owner)


def get_user_tweets(user_id: int, session: Session) -> list[dict]:
    if session.get(User, user_id) is None:
        raise not_found(ErrorCode.USER_NOT_FOUND, "User", user_id)

    likes_count = (
        select(func.count(Like.id))
        .where(Like.tweet_id == Tweet.id)
        .scalar_subquery()
    )
    stmt = (
        select(Tweet, User, likes_count.label("likes_count"))
        .join(User, Tweet.owner_id == User.id)
        .where(Tweet.owner_id == user_id)
        .order_by(Tweet.created_at.desc(), Tweet.id.desc())
    )
    return [
        _serialize_tweet(row[0], row[1], row.likes_count)
        for row in session.execute(stmt).all()
    ]


def update_tweet(tweet_id: int, caller_id: int, content: str, session: Session) -> dict:
    tweet = _get_own_tweet(tweet_id, caller_id, session, "edit")
    tweet.content = content.strip()
    session.flush()

    likes_count = session.execute(
        select(func.count(Like.id)).where(Like.tweet_id == tweet.id)
    ).scalar_one()
    return _serialize_tweet(tweet, tweet.owner, likes_count)


def delete_tweet(tweet_id: int, caller_id: int, session: Session) -> None:
    tweet = _get_own_tweet(tweet_id, caller_id, session, "delete")
    session.delete(tweet)
    session.flush()
