"""Marshmallow schemas for Entity."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class EntitySchema(Schema):
    """Serialize Entity."""

    id = fields.Str(required=True)
    name = fields.Str(required=True)
    display_name = fields.Str(required=True)
    emoji = fields.Str()
    tagline = fields.Str()
    raffle_percentage = fields.Int()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class EntityCreateSchema(Schema):
    """Validate create Entity payload."""

    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    display_name = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    emoji = fields.Str(required=False, load_default=None)
    tagline = fields.Str(required=False, load_default=None)
    raffle_percentage = fields.Int(required=False, load_default=None, validate=validate.Range(min=0, max=100))


class EntityUpdateSchema(Schema):
    """Validate partial Entity update payload."""

    name = fields.Str(validate=validate.Length(min=1, max=100))
    display_name = fields.Str(validate=validate.Length(min=1, max=200))
    emoji = fields.Str()
    tagline = fields.Str()
    raffle_percentage = fields.Int(validate=validate.Range(min=0, max=100))
