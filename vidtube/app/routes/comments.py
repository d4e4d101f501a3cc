"""
routes/comments.py: Comment route handlers.

Endpoints (url_prefix=/api/v1/comments):
  GET    /comments/v/:video_id   → 200  paginated, newest first (auth optional)
  POST   /comments/v/:video_id   → 201
  PATCH  /comments/:id           → 200  author only
  DELETE /comments/:id           → 200  author only
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from vidtube.app.extensions import db
from vidtube.app.middleware.auth_middleware import optional_auth, require_auth
from vidtube.app.schemas.common import PaginationSchema
from vidtube.app.schemas.content_schema import CommentSchema
from vidtube.app.services import comment_service

comments_bp = Blueprint("comments", __name__)


@comments_bp.route("/v/<int:video_id>", methods=["GET"])
@optional_auth
def list_comments(video_id: int):
    params = PaginationSchema().load(request.args)
    result = comment_service.list_video_comments(
        video_id=video_id,
        viewer_id=g.user_id,
        page=params["page"],
        limit=params["limit"],
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@comments_bp.route("/v/<int:video_id>", methods=["POST"])
@require_auth
def add_comment(video_id: int):
    data = CommentSchema().load(request.get_json(silent=True) or {})
    result = comment_service.add_comment(
        video_id=video_id,
        caller_id=g.user_id,
        content=data["content"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@comments_bp.route("/<int:comment_id>", methods=["PATCH"])
@require_auth
def update_comment(comment_id: int):
    data = CommentSchema().load(request.get_json(silent=True) or {})
    result = comment_service.update_comment(
        comment_id=comment_id,
        caller_id=g.user_id,
        content=data["content"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@comments_bp.route("/<int:comment_id>", methods=["DELETE"])
@require_auth
def delete_comment(comment_id: int):
    comment_service.delete_comment(comment_id=comment_id, caller_id=g.user_id, session=db.session)
    db.session.commit()
    return jsonify({"data": {"message": "Comment deleted."}, "warnings": []}), 200
