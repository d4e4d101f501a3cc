"""
routes/likes.py: Like toggles and the caller's liked videos.

A toggle answers 201 {"liked": true} when it created the like and
200 {"liked": false} when it removed it.

Endpoints (url_prefix=/api/v1/likes):
  POST   /likes/toggle/v/:video_id
  POST   /likes/toggle/c/:comment_id
  POST   /likes/toggle/t/:tweet_id
  GET    /likes/videos
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from vidtube.app.extensions import db
from vidtube.app.middleware.auth_middleware import require_auth
from vidtube.app.services import like_service

likes_bp = Blueprint("likes", __name__)


def _toggle_response(liked: bool):
    db.session.commit()
    return jsonify({"data": {"liked": liked}, "warnings": []}), 201 if liked else 200


@likes_bp.route("/toggle/v/<int:video_id>", methods=["POST"])
@require_auth
def toggle_video_like(video_id: int):
    liked = like_service.toggle_video_like(video_id=video_id, caller_id=g.user_id, session=db.session)
    return _toggle_response(liked)


@likes_bp.route("/toggle/c/<int:comment_id>", methods=["POST"])
@require_auth
def toggle_comment_like(comment_id: int):
    liked = like_service.toggle_comment_like(
        comment_id=comment_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return _toggle_response(liked)


@likes_bp.route("/toggle/t/<int:tweet_id>", methods=["POST"])
@require_auth
def toggle_tweet_like(tweet_id: int):
    liked = like_service.toggle_tweet_like(tweet_id=tweet_id, caller_id=g.user_id, session=db.session)
    return _toggle_response(liked)


@likes_bp.route("/videos", methods=["GET"])
@require_auth
def liked_videos():
    result = like_service.get_liked_videos(caller_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200
