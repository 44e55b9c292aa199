"""Schemas for the purchase ledger API."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from raffledesk.schemas.common import DateRangeSchema


class RaffleTicketSchema(Schema):
    id = fields.Str()
    ticket_number = fields.Int()
    purchase_id = fields.Str()
    created_at = fields.DateTime()


class PurchaseSchema(Schema):
    id = fields.Str()
    entity_id = fields.Str()
    session_id = fields.Str(allow_none=True)
    buyer_name = fields.Str()
    raffler_name = fields.Str()
    ticket_count = fields.Int()
    price_per_ticket = fields.Float()
    total_price = fields.Float()
    start_ticket_number = fields.Int()
    end_ticket_number = fields.Int()
    is_gift = fields.Bool()
    gifter_name = fields.Str(allow_none=True)
    is_paid = fields.Bool()
    created_at = fields.DateTime()
    tickets = fields.List(fields.Nested(RaffleTicketSchema))


class PurchaseCreateSchema(Schema):
    entity_id = fields.Str(required=True, validate=validate.Length(min=1))
    buyer_name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    raffler_name = fields.Str(required=False, load_default=None, validate=validate.Length(max=200))
    ticket_count = fields.Int(required=True, strict=True, validate=validate.Range(min=1))
    price_per_ticket = fields.Decimal(
        required=True,
        places=2,
        allow_nan=False,
        validate=validate.Range(min=0, min_inclusive=False),
    )
    is_gift = fields.Bool(required=False, load_default=False)
    gifter_name = fields.Str(required=False, load_default=None, validate=validate.Length(max=200))

    @validates_schema
    def _validate_gift(self, data, **kwargs):  # type: ignore[no-untyped-def]
        if data.get("is_gift") and not (data.get("gifter_name") or "").strip():
            raise ValidationError({"gifter_name": ["Required when is_gift is set"]})


class PaymentStatusSchema(Schema):
    is_paid = fields.Bool(required=True)


class BuyerNameSchema(Schema):
    buyer_name = fields.Str(required=True, validate=validate.Length(min=1, max=200))


class PurchaseFilterSchema(DateRangeSchema):
    """Query parameters for listing an entity's purchases."""

    session_only = fields.Bool(required=False, load_default=False)
    session_id = fields.Str(required=False, load_default=None)


class AnnouncementRequestSchema(Schema):
    entity_id = fields.Str(required=True, validate=validate.Length(min=1))
    raffler_name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    price_per_ticket = fields.Decimal(
        required=True,
        places=2,
        allow_nan=False,
        validate=validate.Range(min=0, min_inclusive=False),
    )
