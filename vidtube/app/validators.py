"""
validators.py: Identifier, email, username and password rules.

Pure functions with no Flask or DB dependency. The marshmallow schemas call
these for field validation; auth_service calls classify_identifier() to pick
the column a login identifier is matched against.

Email rule: lowercase letters/digits only, then '@' and an allowed domain.
Only gmail.com is allowed today (see ALLOWED_EMAIL_DOMAINS).
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

ALLOWED_EMAIL_DOMAINS: tuple[str, ...] = ("gmail.com",)

USERNAME_RE = re.compile(r"^[a-z0-9]+$")
USERNAME_MAX_LENGTH = 50

PASSWORD_SYMBOLS = "!@#$%^&*"
PASSWORD_RE = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*])[A-Za-z\d!@#$%^&*]{8,}$"
)
# bcrypt ignores (or rejects) input past 72 bytes.
PASSWORD_MAX_LENGTH = 72


def _email_re(domains: tuple[str, ...]) -> re.Pattern:
    alternatives = "|".join(re.escape(d) for d in domains)
    return re.compile(rf"^[a-z0-9]+@(?:{alternatives})$")


EMAIL_RE = _email_re(ALLOWED_EMAIL_DOMAINS)


class IdentifierKind(str, enum.Enum):
    EMAIL = "email"
    USERNAME = "username"


@dataclass(frozen=True)
class IdentifierResult:
    valid: bool
    kind: IdentifierKind | None
    value: str


def normalize(raw: str | None) -> str:
    """Trims and lowercases. None becomes the empty string."""
    return (raw or "").strip().lower()


def is_valid_email(raw: str | None) -> bool:
    return bool(EMAIL_RE.match(normalize(raw)))


def is_valid_username(raw: str | None) -> bool:
    value = normalize(raw)
    return len(value) <= USERNAME_MAX_LENGTH and bool(USERNAME_RE.match(value))


def classify_identifier(raw: str | None) -> IdentifierResult:
    """
    Normalizes a login identifier and decides whether it is an email or a
    username. The two patterns are mutually exclusive ('@' is not allowed in
    a username).

        >>> classify_identifier("  Jane@Gmail.com ").kind
        <IdentifierKind.EMAIL: 'email'>
        >>> classify_identifier("Jane_Doe").valid
        False
    """
    value = normalize(raw)
    if not value:
        return IdentifierResult(False, None, value)
    if EMAIL_RE.match(value):
        return IdentifierResult(True, IdentifierKind.EMAIL, value)
    if USERNAME_RE.match(value):
        return IdentifierResult(True, IdentifierKind.USERNAME, value)
    return IdentifierResult(False, None, value)


def is_strong_password(password: str | None) -> bool:
    """
    8 to 72 characters with at least one lowercase letter, one uppercase
    letter, one digit and one of !@#$%^&*. No other characters are allowed.
    """
    if not password or len(password) > PASSWORD_MAX_LENGTH:
        return False
    return bool(PASSWORD_RE.match(password))
