"""
routes/users.py: Account, channel profile and watch-history handlers.

Endpoints (url_prefix=/api/v1/users):
  GET    /users/me               → 200  own profile
  PATCH  /users/me               → 200  update full_name / email
  PATCH  /users/me/avatar        → 200
  PATCH  /users/me/cover-image   → 200
  GET    /users/c/:username      → 200  channel profile (auth optional)
  GET    /users/history          → 200  watch history, most recent first
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from vidtube.app.extensions import db
from vidtube.app.middleware.auth_middleware import optional_auth, require_auth
from vidtube.app.schemas.user_schema import AvatarSchema, CoverImageSchema, UpdateAccountSchema
from vidtube.app.services import auth_service, user_service

users_bp = Blueprint("users", __name__)


@users_bp.route("/me", methods=["GET"])
@require_auth
def get_me():
    result = auth_service.get_current_user(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@users_bp.route("/me", methods=["PATCH"])
@require_auth
def update_me():
    """PATCH /users/me: At least one of full_name, email."""
    data = UpdateAccountSchema().load(request.get_json(silent=True) or {})
    result = user_service.update_account(user_id=g.user_id, data=data, session=db.session)
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@users_bp.route("/me/avatar", methods=["PATCH"])
@require_auth
def update_avatar():
    data = AvatarSchema().load(request.get_json(silent=True) or {})
    result = user_service.update_avatar(
        user_id=g.user_id,
        avatar=data["avatar"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@users_bp.route("/me/cover-image", methods=["PATCH"])
@require_auth
def update_cover_image():
    data = CoverImageSchema().load(request.get_json(silent=True) or {})
    result = user_service.update_cover_image(
        user_id=g.user_id,
        cover_image=data["cover_image"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@users_bp.route("/c/<string:username>", methods=["GET"])
@optional_auth
def channel_profile(username: str):
    """GET /users/c/:username: Public channel page; is_subscribed needs a token."""
    result = user_service.get_channel_profile(
        username=username,
        viewer_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@users_bp.route("/history", methods=["GET"])
@require_auth
def watch_history():
    result = user_service.get_watch_history(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200
