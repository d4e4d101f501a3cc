"""
security.py: Password hashing and JWT issuance/verification.

Both classes are constructed once by the app factory from app.config and
passed into services explicitly. Neither reads the environment or Flask
config mid-request.

Password storage:
  - bcrypt with a random salt per hash; cost factor fixed at construction
    (BCRYPT_LOG_ROUNDS).
  - Plaintext passwords are never logged or persisted.

Token design:
  - Access token:  HS256, signed with ACCESS_TOKEN_SECRET, minutes-scale TTL.
                   Claims: sub, email, username, full_name, type, iat, exp, jti.
  - Refresh token: HS256, signed with REFRESH_TOKEN_SECRET, days-scale TTL.
                   Claims: sub, type, iat, exp, jti.
  - jti guarantees two tokens issued in the same second still differ.
"""

from __future__ import annotations

import enum
import functools
import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

import bcrypt
import jwt


class TokenKind(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class InvalidTokenError(Exception):
    """Signature invalid, payload malformed, or wrong token type."""


class TokenExpiredError(InvalidTokenError):
    """Signature valid but the exp claim has passed."""


def hash_token(raw_token: str) -> str:
    """SHA-256 hex digest of a raw token. Refresh tokens are stored this way."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


class PasswordHasher:

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(
            plaintext.encode("utf-8"),
            bcrypt.gensalt(rounds=self.rounds),
        ).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        # bcrypt.checkpw compares in constant time.
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash.
            return False

    @functools.cached_property
    def dummy_hash(self) -> str:
        """A hash of a random secret, at this hasher's cost, that no password matches."""
        return self.hash(secrets.token_urlsafe(32))


@dataclass(frozen=True)
class TokenSettings:
    access_secret: str
    access_ttl: timedelta
    refresh_secret: str
    refresh_ttl: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenSettings":
        return cls(
            access_secret=config["ACCESS_TOKEN_SECRET"],
            access_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )


class TokenIssuer:
    """
    Signs and verifies the two token classes.

    Issuance has no side effects. Persisting the refresh token on the user
    record is the session manager's job (services/auth_service.py).
    """

    def __init__(self, settings: TokenSettings) -> None:
        self.settings = settings

    def issue_access(self, user) -> str:
        return self._sign(
            {
                "sub": str(user.id),
                "email": user.email,
                "username": user.username,
                "full_name": user.full_name,
            },
            TokenKind.ACCESS,
        )

    def issue_refresh(self, user) -> str:
        return self._sign({"sub": str(user.id)}, TokenKind.REFRESH)

    def issue_pair(self, user) -> dict:
        return {
            "accessToken": self.issue_access(user),
            "refreshToken": self.issue_refresh(user),
        }

    def verify(self, token: str, kind: TokenKind) -> dict:
        """
        Returns the token's claims.

        Raises:
          TokenExpiredError: signature fine, exp elapsed
          InvalidTokenError: bad signature, malformed payload, wrong type,
                              or a sub claim that is not a user id
        """
        secret, _ = self._secret_and_ttl(kind)
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.settings.algorithm],
                options={"require": ["sub", "exp", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(str(exc)) from exc

        if claims.get("type") != kind.value:
            raise InvalidTokenError(f"expected a {kind.value} token")
        try:
            claims["user_id"] = int(claims["sub"])
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("sub claim is not a user id") from exc
        return claims

    def _secret_and_ttl(self, kind: TokenKind) -> tuple[str, timedelta]:
        if kind is TokenKind.ACCESS:
            return self.settings.access_secret, self.settings.access_ttl
        return self.settings.refresh_secret, self.settings.refresh_ttl

    def _sign(self, claims: dict, kind: TokenKind) -> str:
        secret, ttl = self._secret_and_ttl(kind)
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "type": kind.value,
            "iat": now,
            "exp": now + ttl,
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, secret, algorithm=self.settings.algorithm)
