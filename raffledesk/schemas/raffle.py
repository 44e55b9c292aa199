"""Schemas for raffles and draws."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from raffledesk.models.raffle import DEFAULT_MAX_TICKETS


class RaffleSchema(Schema):
    id = fields.Str()
    entity_id = fields.Str()
    name = fields.Str()
    description = fields.Str()
    prize_description = fields.Str()
    ticket_price = fields.Float()
    max_tickets = fields.Int()
    sold_tickets = fields.Int()
    is_active = fields.Bool()
    draw_date = fields.DateTime(allow_none=True)
    winning_ticket_number = fields.Int(allow_none=True)
    winner_id = fields.Str(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class RaffleCreateSchema(Schema):
    entity_id = fields.Str(required=True, validate=validate.Length(min=1))
    name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=False, load_default=None)
    prize_description = fields.Str(required=True, validate=validate.Length(min=1, max=500))
    ticket_price = fields.Decimal(
        required=True,
        places=2,
        allow_nan=False,
        validate=validate.Range(min=0, min_inclusive=False),
    )
    max_tickets = fields.Int(required=False, load_default=DEFAULT_MAX_TICKETS, validate=validate.Range(min=1))
    draw_date = fields.DateTime(required=False, load_default=None)


class RaffleUpdateSchema(Schema):
    name = fields.Str(validate=validate.Length(min=1, max=200))
    description = fields.Str()
    prize_description = fields.Str(validate=validate.Length(min=1, max=500))
    ticket_price = fields.Decimal(places=2, allow_nan=False, validate=validate.Range(min=0, min_inclusive=False))
    max_tickets = fields.Int(validate=validate.Range(min=1))
    is_active = fields.Bool()
    draw_date = fields.DateTime()


class DrawResultSchema(Schema):
    raffle_id = fields.Str()
    winning_ticket_number = fields.Int()
    winner_name = fields.Str()
    prize_name = fields.Str()
    purchase_id = fields.Str()
