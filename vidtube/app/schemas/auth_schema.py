"""
schemas/auth_schema.py: Marshmallow schemas for authentication endpoints.

Validation responsibility:
  - This file: field presence, lengths, formats (username, email, password
    policy). Username and email are normalised (trim + lowercase) before
    validation so the service only ever sees canonical values.
  - services/auth_service.py: DUPLICATE_EMAIL / DUPLICATE_USERNAME checks and
    identifier classification at login (both need the service's context).

Error messages that ARE an ErrorCode constant (INVALID_EMAIL, WEAK_PASSWORD,
...) are turned into that code by the ValidationError handler in
app/__init__.py.

IMPORTANT: All schemas inherit from marshmallow.Schema directly.
           Do NOT use ma.Schema: it requires an active Flask app context
           and breaks unit tests. See extensions.py for the full explanation.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, pre_load, validates, validates_schema

from vidtube.app.errors import ErrorCode
from vidtube.app.schemas.common import non_blank_str, validate_non_empty_after_trim
from vidtube.app.validators import (
    is_strong_password,
    is_valid_email,
    is_valid_username,
    normalize,
)


def _normalise_identity_fields(data, fields_to_normalise: tuple[str, ...]):
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for key in fields_to_normalise:
        if isinstance(data.get(key), str):
            data[key] = normalize(data[key])
    return data


class RegisterSchema(Schema):
    """
    POST /auth/register

    Field rules:
      username    : lowercase letters and digits only, max 50 chars
      email       : lowercase letters/digits local part @ an allowed domain
      full_name   : non-blank, max 100 chars
      password    : see validators.is_strong_password()
      avatar      : optional URL of an already-hosted image
      cover_image : optional URL of an already-hosted image
    """

    username = fields.Str(required=True)
    email = fields.Str(required=True)
    full_name = non_blank_str(max_length=100, required=True)
    password = fields.Str(required=True, load_only=True)
    avatar = fields.Url(load_default=None)
    cover_image = fields.Url(load_default=None)

    @pre_load
    def normalise(self, data, **kwargs):
        return _normalise_identity_fields(data, ("username", "email"))

    @validates("username")
    def validate_username(self, value: str, **kwargs) -> None:
        if not is_valid_username(value):
            raise ValidationError(ErrorCode.INVALID_USERNAME)

    @validates("email")
    def validate_email(self, value: str, **kwargs) -> None:
        if not is_valid_email(value):
            raise ValidationError(ErrorCode.INVALID_EMAIL)

    @validates("password")
    def validate_password_strength(self, value: str, **kwargs) -> None:
        if not is_strong_password(value):
            raise ValidationError(ErrorCode.WEAK_PASSWORD)


class LoginSchema(Schema):
    """
    POST /auth/login

    `identifier` may be a username or an email; auth_service classifies it.
    Credential correctness is checked in auth_service.py
    (INVALID_CREDENTIALS, 401).
    """

    identifier = fields.Str(required=True, validate=validate_non_empty_after_trim)
    password = fields.Str(required=True, load_only=True, validate=validate_non_empty_after_trim)


class RefreshTokenSchema(Schema):
    """
    POST /auth/refresh

    The refresh token is optional in the body because browser clients send
    it as the refreshToken cookie instead. The route falls back to the
    cookie when the body does not carry one.
    """

    refresh_token = fields.Str(data_key="refreshToken", load_default=None)


class ChangePasswordSchema(Schema):
    """
    POST /auth/change-password

    new_password must equal confirm_password (PASSWORD_MISMATCH) and satisfy
    the password policy (WEAK_PASSWORD). Whether old_password is correct is a
    service concern (INVALID_CREDENTIALS, 401).
    """

    old_password = fields.Str(required=True, load_only=True)
    new_password = fields.Str(required=True, load_only=True)
    confirm_password = fields.Str(required=True, load_only=True)

    @validates_schema
    def validate_new_password(self, data, **kwargs) -> None:
        if data["new_password"] != data["confirm_password"]:
            raise ValidationError(ErrorCode.PASSWORD_MISMATCH, "confirm_password")
        if not is_strong_password(data["new_password"]):
            raise ValidationError(ErrorCode.WEAK_PASSWORD, "new_password")
