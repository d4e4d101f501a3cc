"""
errors.py: AppError base class and error code registry.

Every error returned by the VidTube API uses a code defined here.
Do not raise strings or generic exceptions from service or route code.

Rules:
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - 401 means we do not know who you are; 403 means we know and you may not.
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which request field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
# These are the string values sent in the API response.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD              = "MISSING_FIELD"
    INVALID_FIELD              = "INVALID_FIELD"
    INVALID_IDENTIFIER         = "INVALID_IDENTIFIER"
    INVALID_EMAIL              = "INVALID_EMAIL"
    INVALID_USERNAME           = "INVALID_USERNAME"
    WEAK_PASSWORD              = "WEAK_PASSWORD"
    PASSWORD_MISMATCH          = "PASSWORD_MISMATCH"
    EMPTY_UPDATE               = "EMPTY_UPDATE"
    SELF_SUBSCRIPTION          = "SELF_SUBSCRIPTION"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    DUPLICATE_EMAIL            = "DUPLICATE_EMAIL"
    DUPLICATE_USERNAME         = "DUPLICATE_USERNAME"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    NOT_FOUND                  = "NOT_FOUND"
    METHOD_NOT_ALLOWED         = "METHOD_NOT_ALLOWED"         # 405
    USER_NOT_FOUND             = "USER_NOT_FOUND"
    CHANNEL_NOT_FOUND          = "CHANNEL_NOT_FOUND"
    VIDEO_NOT_FOUND            = "VIDEO_NOT_FOUND"
    COMMENT_NOT_FOUND          = "COMMENT_NOT_FOUND"
    TWEET_NOT_FOUND            = "TWEET_NOT_FOUND"
    PLAYLIST_NOT_FOUND         = "PLAYLIST_NOT_FOUND"
    VIDEO_NOT_IN_PLAYLIST      = "VIDEO_NOT_IN_PLAYLIST"

    # ── Auth Errors ────────────────────────────────────────────────────────
    # 401 = we do not know who you are (unauthenticated)
    # 403 = we know who you are, but you are not allowed (not the owner)
    INVALID_CREDENTIALS        = "INVALID_CREDENTIALS"    # 401
    TOKEN_MISSING              = "TOKEN_MISSING"          # 401
    TOKEN_INVALID              = "TOKEN_INVALID"          # 401
    TOKEN_EXPIRED              = "TOKEN_EXPIRED"          # 401
    TOKEN_USER_NOT_FOUND       = "TOKEN_USER_NOT_FOUND"   # 401
    REFRESH_TOKEN_INVALID      = "REFRESH_TOKEN_INVALID"  # 401
    REFRESH_TOKEN_EXPIRED      = "REFRESH_TOKEN_EXPIRED"  # 401
    TOKEN_MISMATCH             = "TOKEN_MISMATCH"         # 401: superseded or cleared session
    FORBIDDEN                  = "FORBIDDEN"              # 403

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR             = "INTERNAL_ERROR"


def not_found(code: str, what: str, ident) -> AppError:
    """Builds the standard 404 for a missing row: '<What> <id> does not exist.'"""
    return AppError(code, f"{what} {ident} does not exist.", 404)


def forbidden(message: str) -> AppError:
    return AppError(ErrorCode.FORBIDDEN, message, 403)
