"""Shared schema pieces."""

from __future__ import annotations

from datetime import datetime, timezone

from marshmallow import Schema, fields, post_load


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DateRangeSchema(Schema):
    """``start_date`` / ``end_date`` query parameters (ISO 8601)."""

    start_date = fields.DateTime(required=False, load_default=None)
    end_date = fields.DateTime(required=False, load_default=None)

    @post_load
    def _normalize(self, data, **kwargs):  # type: ignore[no-untyped-def]
        data["start_date"] = to_naive_utc(data.get("start_date"))
        data["end_date"] = to_naive_utc(data.get("end_date"))
        return data
