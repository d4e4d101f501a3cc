"""
routes/subscriptions.py: Channel subscription handlers.

Endpoints (url_prefix=/api/v1/subscriptions):
  POST   /subscriptions/c/:channel_id               → 201 subscribed / 200 unsubscribed
  GET    /subscriptions/c/:channel_id/subscribers   → 200
  GET    /subscriptions/u/:subscriber_id/channels   → 200
  GET    /subscriptions/me/channels                 → 200
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from vidtube.app.extensions import db
from vidtube.app.middleware.auth_middleware import require_auth
from vidtube.app.services import subscription_service

subscriptions_bp = Blueprint("subscriptions", __name__)


@subscriptions_bp.route("/c/<int:channel_id>", methods=["POST"])
@require_auth
def toggle_subscription(channel_id: int):
    subscribed = subscription_service.toggle_subscription(
        channel_id=channel_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    status = 201 if subscribed else 200
    return jsonify({"data": {"subscribed": subscribed}, "warnings": []}), status


@subscriptions_bp.route("/c/<int:channel_id>/subscribers", methods=["GET"])
@require_auth
def channel_subscribers(channel_id: int):
    result = subscription_service.get_channel_subscribers(
        channel_id=channel_id,
        viewer_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@subscriptions_bp.route("/u/<int:subscriber_id>/channels", methods=["GET"])
@require_auth
def subscribed_channels(subscriber_id: int):
    result = subscription_service.get_subscribed_channels(
        subscriber_id=subscriber_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@subscriptions_bp.route("/me/channels", methods=["GET"])
@require_auth
def my_channels():
    result = subscription_service.get_subscribed_channels(
        subscriber_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200
