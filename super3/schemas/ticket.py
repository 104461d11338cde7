"""Marshmallow schemas for tickets."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from super3.entities import MAX_NUMBER, MIN_NUMBER, TICKET_SIZE


class TicketSchema(Schema):
    """Serialize a live ticket or a ticket snapshot."""

    id = fields.String(required=True)
    custom_id = fields.String(allow_none=True)
    serial_number = fields.String()
    numbers = fields.List(fields.Integer())
    is_checked = fields.Boolean()
    is_complete = fields.Boolean()
    created_at = fields.DateTime()
    game_id = fields.String(dump_only=True)
    original_ticket_id = fields.String(dump_only=True)


class TicketUpdateSchema(Schema):
    """Validate a ticket edit.

    Numbers are either empty or exactly seven distinct values in 1..90. A
    blank serial clears it and leaves the ticket incomplete (and unchecked).
    """

    custom_id = fields.String(required=False, allow_none=True)
    serial_number = fields.String(required=False, validate=validate.Length(max=64))
    numbers = fields.List(
        fields.Integer(validate=validate.Range(min=MIN_NUMBER, max=MAX_NUMBER)),
        required=False,
    )
    is_checked = fields.Boolean(required=False)

    @validates_schema
    def _validate_numbers(self, data, **kwargs):  # type: ignore[no-untyped-def]
        nums = data.get("numbers")
        if nums is not None:
            if len(nums) not in (0, TICKET_SIZE):
                raise ValidationError(
                    {"numbers": [f"Enter exactly {TICKET_SIZE} numbers or leave all empty"]}
                )
            if len(nums) != len(set(nums)):
                raise ValidationError({"numbers": ["Numbers must be unique"]})


class TicketBatchCreateSchema(Schema):
    count = fields.Integer(required=True, validate=validate.Range(min=1, max=200))


class TicketFillSchema(Schema):
    limit = fields.Integer(required=False, load_default=None, validate=validate.Range(min=1))


class TicketStatsSchema(Schema):
    total = fields.Integer()
    complete = fields.Integer()
    incomplete = fields.Integer()
    checked = fields.Integer()
    total_cost = fields.Float()
