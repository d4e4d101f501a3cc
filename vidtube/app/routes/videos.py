"""
routes/videos.py: Video route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries.

Endpoints (url_prefix=/api/v1/videos):
  GET    /videos                       → 200  public videos (search, sort, paginate)
  GET    /videos/user/:user_id         → 200  one user's videos (auth optional)
  POST   /videos                       → 201  publish
  GET    /videos/:id                   → 200  one video (auth optional; counts a view)
  PATCH  /videos/:id                   → 200  owner only
  DELETE /videos/:id                   → 200  owner only
  PATCH  /videos/:id/toggle-publish    → 200  owner only
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from vidtube.app.extensions import db
from vidtube.app.middleware.auth_middleware import optional_auth, require_auth
from vidtube.app.schemas.video_schema import (
    CreateVideoSchema,
    UpdateVideoSchema,
    VideoListQuerySchema,
)
from vidtube.app.services import video_service

videos_bp = Blueprint("videos", __name__)


@videos_bp.route("/", methods=["GET"])
def list_videos():
    """GET /videos?query=&sort_by=&sort_type=&page=&limit="""
    params = VideoListQuerySchema().load(request.args)
    result = video_service.list_videos(
        query=params["query"],
        sort_by=params["sort_by"],
        sort_type=params["sort_type"],
        page=params["page"],
        limit=params["limit"],
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@videos_bp.route("/user/<int:user_id>", methods=["GET"])
@optional_auth
def list_user_videos(user_id: int):
    """GET /videos/user/:user_id: Private videos are included for the owner only."""
    params = VideoListQuerySchema().load(request.args)
    result = video_service.list_user_videos(
        user_id=user_id,
        viewer_id=g.user_id,
        query=params["query"],
        sort_by=params["sort_by"],
        sort_type=params["sort_type"],
        page=params["page"],
        limit=params["limit"],
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@videos_bp.route("/", methods=["POST"])
@require_auth
def publish_video():
    data = CreateVideoSchema().load(request.get_json(silent=True) or {})
    result = video_service.publish_video(owner_id=g.user_id, data=data, session=db.session)
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@videos_bp.route("/<int:video_id>", methods=["GET"])
@optional_auth
def get_video(video_id: int):
    """GET /videos/:id: Commits because a signed-in viewer's visit is recorded."""
    result = video_service.get_video(
        video_id=video_id,
        viewer_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@videos_bp.route("/<int:video_id>", methods=["PATCH"])
@require_auth
def update_video(video_id: int):
    data = UpdateVideoSchema().load(request.get_json(silent=True) or {})
    result = video_service.update_video(
        video_id=video_id,
        caller_id=g.user_id,
        data=data,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@videos_bp.route("/<int:video_id>", methods=["DELETE"])
@require_auth
def delete_video(video_id: int):
    video_service.delete_video(video_id=video_id, caller_id=g.user_id, session=db.session)
    db.session.commit()
    return jsonify({"data": {"message": "Video deleted."}, "warnings": []}), 200


@videos_bp.route("/<int:video_id>/toggle-publish", methods=["PATCH"])
@require_auth
def toggle_publish(video_id: int):
    result = video_service.toggle_publish_status(
        video_id=video_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200
