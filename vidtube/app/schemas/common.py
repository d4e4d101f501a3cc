"""
schemas/common.py: Shared field validators and query-string schemas.

IMPORTANT: Inherits from marshmallow.Schema directly: never ma.Schema.
           See extensions.py for the full explanation.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


# ── Shared non-empty string validator ─────────────────────────────────────
#
# validate.Length(min=1) alone allows whitespace-only strings like "   "
# because len("   ") == 3 > 0. This validator strips first then checks,
# mirroring the DB CHECK(LENGTH(TRIM(...)) > 0) constraints at the API layer.
# ──────────────────────────────────────────────────────────────────────────

def validate_non_empty_after_trim(value: str) -> None:
    """
    Raises ValidationError if the string is blank or contains only whitespace.
    """
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


def non_blank_str(max_length: int | None = None, **kwargs) -> fields.String:
    """A trimmed-non-empty string field, optionally length-capped."""
    validators = [validate_non_empty_after_trim]
    if max_length is not None:
        validators.insert(0, validate.Length(
            max=max_length,
            error=f"Must be at most {max_length} characters.",
        ))
    return fields.Str(validate=validators, **kwargs)


class PaginationSchema(Schema):
    """
    ?page=&limit= on every paginated list endpoint.

    Unknown query parameters are ignored rather than rejected so clients can
    add cache-busters without breaking.
    """

    class Meta:
        unknown = EXCLUDE

    page = fields.Int(
        load_default=1,
        validate=validate.Range(min=1, error="page must be at least 1."),
    )
    limit = fields.Int(
        load_default=DEFAULT_PAGE_SIZE,
        validate=validate.Range(
            min=1,
            max=MAX_PAGE_SIZE,
            error=f"limit must be between 1 and {MAX_PAGE_SIZE}.",
        ),
    )
