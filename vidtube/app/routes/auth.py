"""
routes/auth.py: Authentication route handlers.

Layer rules:
  - Parse request body
  - Validate with the appropriate schema (raises ValidationError on bad input)
  - Call exactly ONE service function
  - Commit the DB session
  - Return the standard response envelope: {"data": {...}, "warnings": []}

Cookies are an HTTP concern, so they live here and not in auth_service:
login and refresh set accessToken/refreshToken cookies (HttpOnly, Secure,
SameSite from config); logout and change-password clear them.

AppError propagates to the global error handler in app/__init__.py: routes
never catch it.

Endpoints (url_prefix=/api/v1/auth):
  POST   /auth/register         → 201
  POST   /auth/login            → 200
  POST   /auth/refresh          → 200
  POST   /auth/logout           → 200
  POST   /auth/change-password  → 200
  GET    /auth/me               → 200
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from vidtube.app.extensions import db, get_password_hasher, get_token_issuer
from vidtube.app.middleware.auth_middleware import ACCESS_COOKIE, REFRESH_COOKIE, require_auth
from vidtube.app.schemas.auth_schema import (
    ChangePasswordSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
)
from vidtube.app.services import auth_service

auth_bp = Blueprint("auth", __name__)


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": current_app.config["AUTH_COOKIE_SECURE"],
        "samesite": current_app.config["AUTH_COOKIE_SAMESITE"],
        "path": "/",
    }


def _set_auth_cookies(response, tokens: dict) -> None:
    options = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE,
        tokens["accessToken"],
        max_age=int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds()),
        **options,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        tokens["refreshToken"],
        max_age=int(current_app.config["REFRESH_TOKEN_EXPIRES"].total_seconds()),
        **options,
    )


def _clear_auth_cookies(response) -> None:
    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)


@auth_bp.route("/register", methods=["POST"])
def register():
    """POST /auth/register: Create an account. No tokens are issued."""
    data = RegisterSchema().load(request.get_json(silent=True) or {})
    result = auth_service.register_user(
        username=data["username"],
        email=data["email"],
        full_name=data["full_name"],
        password=data["password"],
        session=db.session,
        hasher=get_password_hasher(),
        avatar=data["avatar"],
        cover_image=data["cover_image"],
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /auth/login: Authenticate with username or email; start a session."""
    data = LoginSchema().load(request.get_json(silent=True) or {})
    result = auth_service.login_user(
        identifier=data["identifier"],
        password=data["password"],
        session=db.session,
        hasher=get_password_hasher(),
        issuer=get_token_issuer(),
    )
    db.session.commit()

    response = jsonify({"data": result, "warnings": []})
    _set_auth_cookies(response, result)
    return response, 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    """
    POST /auth/refresh: Rotate the refresh token and issue a new pair.

    The token is read from the JSON body ("refreshToken") first, then from
    the refreshToken cookie.
    """
    data = RefreshTokenSchema().load(request.get_json(silent=True) or {})
    raw_token = data["refresh_token"] or request.cookies.get(REFRESH_COOKIE)
    result = auth_service.refresh_access_token(
        raw_refresh_token=raw_token,
        session=db.session,
        issuer=get_token_issuer(),
    )
    db.session.commit()

    response = jsonify({"data": result, "warnings": []})
    _set_auth_cookies(response, result)
    return response, 200


@auth_bp.route("/logout", methods=["POST"])
@require_auth
def logout():
    """POST /auth/logout: Clear the stored refresh token and both cookies."""
    auth_service.logout_user(user_id=g.user_id, session=db.session)
    db.session.commit()

    response = jsonify({"data": {"message": "Logged out successfully."}, "warnings": []})
    _clear_auth_cookies(response)
    return response, 200


@auth_bp.route("/change-password", methods=["POST"])
@require_auth
def change_password():
    """POST /auth/change-password: Every session must log in again afterwards."""
    data = ChangePasswordSchema().load(request.get_json(silent=True) or {})
    auth_service.change_password(
        user_id=g.user_id,
        old_password=data["old_password"],
        new_password=data["new_password"],
        session=db.session,
        hasher=get_password_hasher(),
    )
    db.session.commit()

    response = jsonify({"data": {"message": "Password changed. Log in again."}, "warnings": []})
    _clear_auth_cookies(response)
    return response, 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """GET /auth/me: Return current user profile."""
    result = auth_service.get_current_user(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200
