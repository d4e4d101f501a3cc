"""
routes/dashboard.py: Creator dashboard for the signed-in user's channel.

Endpoints (url_prefix=/api/v1/dashboard):
  GET    /dashboard/stats    → 200
  GET    /dashboard/videos   → 200  includes private videos
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from vidtube.app.extensions import db
from vidtube.app.middleware.auth_middleware import require_auth
from vidtube.app.services import dashboard_service

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.route("/stats", methods=["GET"])
@require_auth
def channel_stats():
    result = dashboard_service.get_channel_stats(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@dashboard_bp.route("/videos", methods=["GET"])
@require_auth
def channel_videos():
    result = dashboard_service.get_channel_videos(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200
