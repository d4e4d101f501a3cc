"""
middleware/auth_middleware.py: Access-token authentication decorators.

@require_auth:
  1. Reads the access token from the Authorization header ("Bearer <token>"),
     falling back to the accessToken cookie
  2. Verifies signature, token type and expiry with the TokenIssuer
  3. Loads the user the token was issued to
  4. Attaches user_id (int) and current_user (User) to flask.g
  5. Raises the appropriate 401 AppError if any step fails

@optional_auth does the same when a token is present and sets g.user_id to
None when it is not. An invalid token is still rejected rather than silently
ignored.

Strict responsibility boundary:
  - Authentication only (401). Ownership checks (403) belong to services.
  - Never writes to the database.

Error codes:
  TOKEN_MISSING        (401): no header and no cookie
  TOKEN_INVALID        (401): malformed header, bad signature, wrong type
  TOKEN_EXPIRED        (401): valid token but exp claim is in the past
  TOKEN_USER_NOT_FOUND (401): token subject no longer exists
"""

from __future__ import annotations

import functools
from typing import Callable

from flask import g, request

from vidtube.app.errors import AppError, ErrorCode
from vidtube.app.extensions import db, get_token_issuer
from vidtube.app.models.user import User
from vidtube.app.security import InvalidTokenError, TokenExpiredError, TokenKind

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def require_auth(f: Callable) -> Callable:
    """
    Route decorator that enforces access-token authentication.

    Usage:
        @users_bp.route("/me")
        @require_auth
        def me():
            user_id = g.user_id  # always an int when this runs
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        _authenticate_request(required=True)
        return f(*args, **kwargs)

    return decorated


def optional_auth(f: Callable) -> Callable:
    """Like require_auth, but anonymous callers get g.user_id = None."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        _authenticate_request(required=False)
        return f(*args, **kwargs)

    return decorated


def _extract_token() -> str | None:
    """
    Returns the raw access token, or None when the caller sent none.

    An explicit Authorization header wins over the cookie.
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header:
        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise AppError(
                ErrorCode.TOKEN_INVALID,
                "Authorization header must be in the format: Bearer <token>.",
                401,
            )
        return parts[1]

    return request.cookies.get(ACCESS_COOKIE) or None


def _authenticate_request(required: bool) -> None:
    """
    Performs the full authentication sequence and sets flask.g.user_id /
    flask.g.current_user.

    Raises AppError on any authentication failure; the global error handler
    turns it into the JSON response.
    """
    raw_token = _extract_token()

    if raw_token is None:
        if required:
            raise AppError(
                ErrorCode.TOKEN_MISSING,
                "Authentication required. Send a Bearer token or the accessToken cookie.",
                401,
            )
        g.user_id = None
        g.current_user = None
        return

    try:
        claims = get_token_issuer().verify(raw_token, TokenKind.ACCESS)
    except TokenExpiredError:
        raise AppError(
            ErrorCode.TOKEN_EXPIRED,
            "The access token has expired. Use POST /auth/refresh to obtain a new one.",
            401,
        )
    except InvalidTokenError:
        raise AppError(
            ErrorCode.TOKEN_INVALID,
            "The access token is invalid or has been tampered with.",
            401,
        )

    user = db.session.get(User, claims["user_id"])
    if user is None:
        raise AppError(
            ErrorCode.TOKEN_USER_NOT_FOUND,
            "The account this access token belongs to no longer exists.",
            401,
        )

    g.user_id = user.id
    g.current_user = user
