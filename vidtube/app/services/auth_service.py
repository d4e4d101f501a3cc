"""
services/auth_service.py: Session manager: register, login, logout,
refresh-token rotation and password change.

Layer rules:
  - No Flask imports. No flask.request, flask.g, cookies or HTTP knowledge
    beyond the status codes carried by AppError.
  - The PasswordHasher and TokenIssuer are passed in by the route; this module
    never reads configuration.
  - Commits are the route's responsibility: only flush here.

Session lifecycle (server's point of view):
  Anonymous ──login──▶ Authenticated (users.refresh_token_hash set)
  Authenticated ──refresh──▶ Authenticated (hash replaced; old token dead)
  Authenticated ──logout / change password──▶ Anonymous (hash cleared)

Refresh tokens:
  - Only the SHA-256 of the active refresh token is stored, one per user.
    Issuing a new one (login or refresh) overwrites it, so any older token
    stops working even though its signature and expiry are still valid.
  - Rotation is a single conditional UPDATE ... WHERE refresh_token_hash =
    <presented hash>. Two concurrent refreshes with the same token cannot
    both succeed: the second UPDATE matches zero rows.

Passwords:
  - set_password() is the only place a password hash is written. Register and
    change_password call it; nothing else touches password_hash, so an
    already-hashed value is never hashed again.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from vidtube.app.errors import AppError, ErrorCode
from vidtube.app.models.user import User
from vidtube.app.security import (
    InvalidTokenError,
    PasswordHasher,
    TokenExpiredError,
    TokenIssuer,
    TokenKind,
    hash_token,
)
from vidtube.app.services.serializers import serialize_user
from vidtube.app.services.user_service import (
    duplicate_username,
    ensure_email_available,
    flush_user_identity,
    get_user_or_404,
)
from vidtube.app.validators import IdentifierKind, classify_identifier

logger = logging.getLogger(__name__)


# ── Credential store hooks ─────────────────────────────────────────────────

def set_password(user: User, plaintext: str, hasher: PasswordHasher) -> None:
    """Hashes `plaintext` onto the user record. Call only when the password changes."""
    user.password_hash = hasher.hash(plaintext)


def _invalid_credentials() -> AppError:
    # One error for "no such user" and "wrong password" so login responses
    # never reveal whether an account exists.
    return AppError(
        ErrorCode.INVALID_CREDENTIALS,
        "The identifier or password is incorrect.",
        401,
    )


def ensure_identity_available(username: str, email: str, session: Session) -> None:
    """Username is checked first, so a request clashing on both reports the username."""
    taken = session.execute(
        select(User.id).where(User.username == username)
    ).scalar_one_or_none()
    if taken is not None:
        raise duplicate_username(username)
    ensure_email_available(email, session)


# ── Public service functions ───────────────────────────────────────────────

def register_user(
        username: str,
        email: str,
        full_name: str,
        password: str,
        session: Session,
        hasher: PasswordHasher,
        avatar: str | None = None,
        cover_image: str | None = None,
) -> dict:
    """
    Creates a new account. No tokens are issued; the client logs in next.

    username and email arrive already normalised (trimmed, lowercase) and
    format-checked by RegisterSchema.

    Raises:
      AppError(DUPLICATE_USERNAME, 409): username already taken
      AppError(DUPLICATE_EMAIL, 409)   : email already registered

    Returns: the sanitized user dict.
    """
    ensure_identity_available(username, email, session)

    user = User(
        username=username,
        email=email,
        full_name=full_name.strip(),
    )
    if avatar:
        user.avatar = avatar
    if cover_image:
        user.cover_image = cover_image
    set_password(user, password, hasher)

    session.add(user)
    flush_user_identity(user, session)

    logger.info("Registered user id=%s username=%s", user.id, user.username)
    return serialize_user(user)


def login_user(
        identifier: str,
        password: str,
        session: Session,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
) -> dict:
    """
    Validates credentials and starts a session.

    The identifier is classified as an email or a username before any DB
    lookup; a string matching neither pattern never reaches the database.

    Raises:
      AppError(INVALID_IDENTIFIER, 400) : neither an email nor a username
      AppError(INVALID_CREDENTIALS, 401): unknown user or wrong password

    Returns: {"user": {...}, "accessToken": "...", "refreshToken": "..."}
    """
    resolved = classify_identifier(identifier)
    if not resolved.valid:
        raise AppError(
            ErrorCode.INVALID_IDENTIFIER,
            "Provide a valid username or email address.",
            400,
            field="identifier",
        )

    column = User.email if resolved.kind is IdentifierKind.EMAIL else User.username
    user = session.execute(
        select(User).where(column == resolved.value)
    ).scalar_one_or_none()

    if user is None:
        # Same bcrypt cost as a real account, so response time does not
        # reveal whether the identifier exists.
        hasher.verify(password, hasher.dummy_hash)
        logger.info("Failed login for %s identifier", resolved.kind.value)
        raise _invalid_credentials()

    if not hasher.verify(password, user.password_hash):
        logger.info("Failed login for %s identifier", resolved.kind.value)
        raise _invalid_credentials()

    tokens = issuer.issue_pair(user)
    # Overwrites any previous session: single active refresh token per user.
    user.refresh_token_hash = hash_token(tokens["refreshToken"])
    session.flush()

    logger.info("User id=%s logged in", user.id)
    return {
        "user": serialize_user(user),
        **tokens,
    }


def refresh_access_token(
        raw_refresh_token: str | None,
        session: Session,
        issuer: TokenIssuer,
) -> dict:
    """
    Exchanges a refresh token for a brand-new access + refresh pair.

    Every successful call rotates the refresh token; the presented one is
    dead afterwards.

    Raises:
      AppError(TOKEN_MISSING, 401)         : no token supplied
      AppError(REFRESH_TOKEN_EXPIRED, 401) : signature fine, exp elapsed
      AppError(REFRESH_TOKEN_INVALID, 401) : bad signature / malformed / not a refresh token
      AppError(USER_NOT_FOUND, 404)        : subject no longer exists
      AppError(TOKEN_MISMATCH, 401)        : superseded by a newer login/refresh, or logged out

    Returns: {"accessToken": "...", "refreshToken": "..."}
    """
    if not raw_refresh_token:
        raise AppError(
            ErrorCode.TOKEN_MISSING,
            "A refresh token is required.",
            401,
        )

    try:
        claims = issuer.verify(raw_refresh_token, TokenKind.REFRESH)
    except TokenExpiredError:
        raise AppError(
            ErrorCode.REFRESH_TOKEN_EXPIRED,
            "The refresh token has expired. Log in again.",
            401,
        )
    except InvalidTokenError:
        raise AppError(
            ErrorCode.REFRESH_TOKEN_INVALID,
            "The refresh token is invalid or has been tampered with.",
            401,
        )

    user = get_user_or_404(claims["user_id"], session)

    tokens = issuer.issue_pair(user)
    rotated = session.execute(
        update(User)
        .where(
            User.id == user.id,
            User.refresh_token_hash == hash_token(raw_refresh_token),
        )
        .values(refresh_token_hash=hash_token(tokens["refreshToken"]))
    )
    if rotated.rowcount != 1:
        logger.warning("Rejected stale refresh token for user id=%s", user.id)
        raise AppError(
            ErrorCode.TOKEN_MISMATCH,
            "The refresh token is no longer valid for this session.",
            401,
        )

    return tokens


def logout_user(user_id: int, session: Session) -> None:
    """
    Ends the caller's session by clearing the stored refresh token.

    Safe to repeat: a second call finds nothing to clear and still succeeds.
    The access token is stateless and simply runs out.
    """
    user = get_user_or_404(user_id, session)
    user.refresh_token_hash = None
    session.flush()
    logger.info("User id=%s logged out", user_id)


def change_password(
        user_id: int,
        old_password: str,
        new_password: str,
        session: Session,
        hasher: PasswordHasher,
) -> None:
    """
    Replaces the caller's password after verifying the old one.

    ChangePasswordSchema has already checked new == confirm and the password
    policy. The stored refresh token is cleared too, so every session has to
    log in again with the new password.

    Raises:
      AppError(INVALID_CREDENTIALS, 401): old_password does not verify
    """
    user = get_user_or_404(user_id, session)

    if not hasher.verify(old_password, user.password_hash):
        raise AppError(
            ErrorCode.INVALID_CREDENTIALS,
            "The current password is incorrect.",
            401,
            field="old_password",
        )

    set_password(user, new_password, hasher)
    user.refresh_token_hash = None
    session.flush()
    logger.info("User id=%s changed password; sessions revoked", user_id)


def get_current_user(user_id: int, session: Session) -> dict:
    """
    Returns the sanitized profile of the authenticated user.

    Raises:
      AppError(USER_NOT_FOUND, 404): user deleted between token issue and request.
    """
    return serialize_user(get_user_or_404(user_id, session))
