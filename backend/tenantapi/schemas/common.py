"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

import math
from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate, validates_schema


class SortQuerySchema(Schema):
    """Parse comma-separated ``sort`` query parameters into a list."""

    class Meta:
        unknown = EXCLUDE

    sort = fields.String(load_default="")


class PaginationQuerySchema(SortQuerySchema):
    """Validate pagination parameters with configurable defaults."""

    def __init__(self, *, default_limit: int = 10, max_limit: int = 100, **kwargs: Any) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))

    @post_load
    def apply_defaults(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        raw = data.get("sort") or ""
        data["sort"] = [segment.strip() for segment in raw.split(",") if segment.strip()]
        limit = data.get("limit", self._default_limit)
        data["limit"] = min(max(limit, 1), self._max_limit)
        data.setdefault("page", 1)
        return data


class AtLeastOneFieldSchema(Schema):
    """Reject partial-update payloads that carry no known field."""

    @validates_schema
    def _require_any(self, data: dict[str, Any], **_: Any) -> None:
        if not data:
            raise ValidationError("At least one field must be provided")


def build_meta(*, total: int, page: int, limit: int) -> dict[str, Any]:
    """Return a ``meta`` mapping for paginated responses."""

    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "total": int(total),
        "page": int(page),
        "limit": int(limit),
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPreviousPage": page > 1,
    }
