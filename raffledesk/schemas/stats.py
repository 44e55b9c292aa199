"""Schemas for ticket statistics."""

from __future__ import annotations

from marshmallow import Schema, fields


class TicketStatsSchema(Schema):
    tickets_sold = fields.Int()
    total_revenue = fields.Float()
    prize_amount = fields.Int()
    session_id = fields.Str(allow_none=True)


class CounterSchema(Schema):
    entity_id = fields.Str()
    last_ticket_number = fields.Int()
    next_ticket_number = fields.Int()
