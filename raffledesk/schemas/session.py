"""Schemas for selling sessions."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from raffledesk.schemas.common import DateRangeSchema
from raffledesk.schemas.purchase import PurchaseSchema


class SessionSchema(Schema):
    id = fields.Str()
    entity_id = fields.Str()
    user_id = fields.Str()
    username = fields.Str()
    started_at = fields.DateTime()
    ended_at = fields.DateTime(allow_none=True)
    start_ticket_number = fields.Int()
    end_ticket_number = fields.Int(allow_none=True)
    tickets_sold = fields.Int()
    total_revenue = fields.Float()
    status = fields.Str()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class SessionStartSchema(Schema):
    entity_id = fields.Str(required=True, validate=validate.Length(min=1))


class SessionFilterSchema(DateRangeSchema):
    status = fields.Str(
        required=False,
        load_default=None,
        validate=validate.OneOf(["active", "closed", "all"]),
    )


class SessionTotalsSchema(Schema):
    tickets_sold = fields.Int()
    total_revenue = fields.Float()
    paid_amount = fields.Float()
    unpaid_amount = fields.Float()
    purchase_count = fields.Int()


class SessionSummarySchema(Schema):
    session = fields.Nested(SessionSchema, attribute="raffle_session")
    entity_name = fields.Str()
    purchases = fields.List(fields.Nested(PurchaseSchema))
    stats = fields.Nested(SessionTotalsSchema, attribute="totals")
