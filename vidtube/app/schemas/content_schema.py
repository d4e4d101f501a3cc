"""
schemas/content_schema.py: Schemas for comments, tweets and playlists.

IMPORTANT: Inherits from marshmallow.Schema directly: never ma.Schema.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, validates_schema

from vidtube.app.errors import ErrorCode
from vidtube.app.models.tweet import TWEET_MAX_LENGTH
from vidtube.app.schemas.common import non_blank_str

COMMENT_MAX_LENGTH = 1000


class CommentSchema(Schema):
    """POST /comments/v/:video_id and PATCH /comments/:id"""

    content = non_blank_str(max_length=COMMENT_MAX_LENGTH, required=True)


class TweetSchema(Schema):
    """POST /tweets and PATCH /tweets/:id"""

    content = non_blank_str(max_length=TWEET_MAX_LENGTH, required=True)


class CreatePlaylistSchema(Schema):
    """POST /playlists"""

    name = non_blank_str(max_length=100, required=True)
    description = non_blank_str(max_length=2000, required=True)


class UpdatePlaylistSchema(Schema):
    """PATCH /playlists/:id: at least one of name, description."""

    name = non_blank_str(max_length=100)
    description = non_blank_str(max_length=2000)

    @validates_schema
    def require_one_field(self, data, **kwargs) -> None:
        if not data:
            raise ValidationError(ErrorCode.EMPTY_UPDATE)
