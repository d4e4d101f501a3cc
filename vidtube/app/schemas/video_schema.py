"""
schemas/video_schema.py: Marshmallow schemas for video endpoints.

Ownership (FORBIDDEN, 403) and existence (VIDEO_NOT_FOUND, 404) are service
concerns and are not checked here.

IMPORTANT: Inherits from marshmallow.Schema directly: never ma.Schema.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from vidtube.app.errors import ErrorCode
from vidtube.app.schemas.common import PaginationSchema, non_blank_str

# Sorting allowlist: API value -> Video column name.
SORTABLE_FIELDS = ("created_at", "views", "duration", "title")


class CreateVideoSchema(Schema):
    """
    POST /videos

    video_file and thumbnail are URLs of media that has already been uploaded
    to the media host. duration is in whole seconds.
    """

    title = non_blank_str(max_length=200, required=True)
    description = non_blank_str(max_length=5000, required=True)
    video_file = fields.Url(required=True)
    thumbnail = fields.Url(required=True)
    duration = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="duration must be a positive number of seconds."),
    )
    is_public = fields.Bool(load_default=True)


class UpdateVideoSchema(Schema):
    """PATCH /videos/:id: any of title, description, thumbnail."""

    title = non_blank_str(max_length=200)
    description = non_blank_str(max_length=5000)
    thumbnail = fields.Url()

    @validates_schema
    def require_one_field(self, data, **kwargs) -> None:
        if not data:
            raise ValidationError(ErrorCode.EMPTY_UPDATE)


class VideoListQuerySchema(PaginationSchema):
    """
    GET /videos and GET /videos/user/:id query string.

      query     : case-insensitive substring matched against title and description
      sort_by   : one of SORTABLE_FIELDS (default created_at)
      sort_type : asc | desc (default desc)
    """

    query = fields.Str(load_default=None)
    sort_by = fields.Str(
        load_default="created_at",
        validate=validate.OneOf(SORTABLE_FIELDS),
    )
    sort_type = fields.Str(
        load_default="desc",
        validate=validate.OneOf(("asc", "desc")),
    )
