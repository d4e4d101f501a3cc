"""
routes/playlists.py: Playlist handlers.

Endpoints (url_prefix=/api/v1/playlists):
  POST   /playlists                               → 201
  GET    /playlists/user/:user_id                 → 200
  GET    /playlists/:id                           → 200  (auth optional)
  PATCH  /playlists/:id                           → 200  owner only
  DELETE /playlists/:id                           → 200  owner only
  PATCH  /playlists/:id/videos/:video_id          → 200  add (idempotent)
  DELETE /playlists/:id/videos/:video_id          → 200  remove
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from vidtube.app.extensions import db
from vidtube.app.middleware.auth_middleware import optional_auth, require_auth
from vidtube.app.schemas.content_schema import CreatePlaylistSchema, UpdatePlaylistSchema
from vidtube.app.services import playlist_service

playlists_bp = Blueprint("playlists", __name__)


@playlists_bp.route("/", methods=["POST"])
@require_auth
def create_playlist():
    data = CreatePlaylistSchema().load(request.get_json(silent=True) or {})
    result = playlist_service.create_playlist(
        owner_id=g.user_id,
        name=data["name"],
        description=data["description"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@playlists_bp.route("/user/<int:user_id>", methods=["GET"])
@require_auth
def user_playlists(user_id: int):
    result = playlist_service.get_user_playlists(
        user_id=user_id,
        viewer_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@playlists_bp.route("/<int:playlist_id>", methods=["GET"])
@optional_auth
def get_playlist(playlist_id: int):
    result = playlist_service.get_playlist(
        playlist_id=playlist_id,
        viewer_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@playlists_bp.route("/<int:playlist_id>", methods=["PATCH"])
@require_auth
def update_playlist(playlist_id: int):
    data = UpdatePlaylistSchema().load(request.get_json(silent=True) or {})
    result = playlist_service.update_playlist(
        playlist_id=playlist_id,
        caller_id=g.user_id,
        data=data,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@playlists_bp.route("/<int:playlist_id>", methods=["DELETE"])
@require_auth
def delete_playlist(playlist_id: int):
    playlist_service.delete_playlist(playlist_id=playlist_id, caller_id=g.user_id, session=db.session)
    db.session.commit()
    return jsonify({"data": {"message": "Playlist deleted."}, "warnings": []}), 200


@playlists_bp.route("/<int:playlist_id>/videos/<int:video_id>", methods=["PATCH"])
@require_auth
def add_video(playlist_id: int, video_id: int):
    result = playlist_service.add_video_to_playlist(
        playlist_id=playlist_id,
        video_id=video_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@playlists_bp.route("/<int:playlist_id>/videos/<int:video_id>", methods=["DELETE"])
@require_auth
def remove_video(playlist_id: int, video_id: int):
    playlist_service.remove_video_from_playlist(
        playlist_id=playlist_id,
        video_id=video_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"message": "Video removed from playlist."}, "warnings": []}), 200
