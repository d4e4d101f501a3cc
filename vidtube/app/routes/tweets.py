"""
routes/tweets.py: Tweet handlers.

Endpoints (url_prefix=/api/v1/tweets):
  POST   /tweets                 → 201
  GET    /tweets/user/:user_id   → 200  newest first
  PATCH  /tweets/:id             → 200  author only
  DELETE /tweets/:id             → 200  author only
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from vidtube.app.extensions import db
from vidtube.app.middleware.auth_middleware import require_auth
from vidtube.app.schemas.content_schema import TweetSchema
from vidtube.app.services import tweet_service

tweets_bp = Blueprint("tweets", __name__)


@tweets_bp.route("/", methods=["POST"])
@require_auth
def create_tweet():
    data = TweetSchema().load(request.get_json(silent=True) or {})
    result = tweet_service.create_tweet(owner_id=g.user_id, content=data["content"], session=db.session)
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@tweets_bp.route("/user/<int:user_id>", methods=["GET"])
def user_tweets(user_id: int):
    result = tweet_service.get_user_tweets(user_id=user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@tweets_bp.route("/<int:tweet_id>", methods=["PATCH"])
@require_auth
def update_tweet(tweet_id: int):
    data = TweetSchema().load(request.get_json(silent=True) or {})
    result = tweet_service.update_tweet(
        tweet_id=tweet_id,
        caller_id=g.user_id,
        content=data["content"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@tweets_bp.route("/<int:tweet_id>", methods=["DELETE"])
@require_auth
def delete_tweet(tweet_id: int):
    tweet_service.delete_tweet(tweet_id=tweet_id, caller_id=g.user_id, session=db.session)
    db.session.commit()
    return jsonify({"data": {"message": "Tweet deleted."}, "warnings": []}), 200
