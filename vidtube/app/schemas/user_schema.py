"""
schemas/user_schema.py: Marshmallow schemas for account endpoints.

Email uniqueness is a DB concern checked in user_service.py.

IMPORTANT: Inherits from marshmallow.Schema directly: never ma.Schema.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, pre_load, validates, validates_schema

from vidtube.app.errors import ErrorCode
from vidtube.app.schemas.common import non_blank_str
from vidtube.app.validators import is_valid_email, normalize


class UpdateAccountSchema(Schema):
    """PATCH /users/me: at least one of full_name, email."""

    full_name = non_blank_str(max_length=100)
    email = fields.Str()

    @pre_load
    def normalise(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = {**data, "email": normalize(data["email"])}
        return data

    @validates("email")
    def validate_email(self, value: str, **kwargs) -> None:
        if not is_valid_email(value):
            raise ValidationError(ErrorCode.INVALID_EMAIL)

    @validates_schema
    def require_one_field(self, data, **kwargs) -> None:
        if not data:
            raise ValidationError(ErrorCode.EMPTY_UPDATE)


class AvatarSchema(Schema):
    """PATCH /users/me/avatar"""

    avatar = fields.Url(required=True)


class CoverImageSchema(Schema):
    """PATCH /users/me/cover-image"""

    cover_image = fields.Url(required=True)
