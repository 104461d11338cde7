"""Schemas for the live game and its winners."""

from __future__ import annotations

from marshmallow import Schema, fields, post_load, validate

from super3.entities import MAX_NUMBER, MIN_NUMBER, TICKET_SIZE, GameType, OpponentWinnerData
from super3.schemas.ticket import TicketSchema


class GameSchema(Schema):
    id = fields.String()
    tables = fields.List(fields.Nested(TicketSchema))
    drawn_numbers = fields.List(fields.Integer())
    sorted_drawn_numbers = fields.List(fields.Integer(), dump_only=True)
    winner_tables = fields.List(fields.Nested(TicketSchema))
    game_type = fields.Enum(GameType, by_value=True)
    is_active = fields.Boolean()
    is_opponent_only_mode = fields.Boolean()
    started_at = fields.DateTime()
    finished_at = fields.DateTime(allow_none=True)
    tables_played = fields.Integer()


class WinnerSchema(Schema):
    id = fields.String()
    game_id = fields.String()
    ticket = fields.Nested(TicketSchema)
    winning_amount = fields.Float()
    game_type = fields.Enum(GameType, by_value=True)
    is_player_winner = fields.Boolean()
    created_at = fields.DateTime()


class OpponentWinnerSchema(Schema):
    """Serialize a stored opponent result."""

    id = fields.String()
    game_id = fields.String()
    game_type = fields.Enum(GameType, by_value=True)
    numbers = fields.List(fields.Integer())
    serial_number = fields.String()
    winning_amount = fields.Float()
    notes = fields.String()
    created_at = fields.DateTime()


class OpponentWinnerInputSchema(Schema):
    """Validate an opponent result; loads into `OpponentWinnerData`."""

    game_type = fields.String(
        required=False,
        load_default=GameType.MAIN.value,
        validate=validate.OneOf([t.value for t in GameType]),
    )
    numbers = fields.List(
        fields.Integer(validate=validate.Range(min=MIN_NUMBER, max=MAX_NUMBER)),
        required=False,
        load_default=list,
        validate=validate.Length(max=TICKET_SIZE),
    )
    serial_number = fields.String(required=False, load_default="")
    winning_amount = fields.Float(required=True, validate=validate.Range(min=0))
    notes = fields.String(required=False, load_default="")

    @post_load
    def _make(self, data, **kwargs):  # type: ignore[no-untyped-def]
        return OpponentWinnerData(
            game_type=GameType(data["game_type"]),
            numbers=tuple(data["numbers"]),
            serial_number=data["serial_number"].strip(),
            winning_amount=float(data["winning_amount"]),
            notes=data["notes"].strip(),
        )


class StartGameSchema(Schema):
    opponent_only = fields.Boolean(required=False, load_default=False)


class DrawNumberSchema(Schema):
    number = fields.Integer(required=True, validate=validate.Range(min=MIN_NUMBER, max=MAX_NUMBER))


class FinishGameSchema(Schema):
    main_amount = fields.Float(required=False, load_default=0.0, validate=validate.Range(min=0))
    secondary_amount = fields.Float(required=False, load_default=0.0, validate=validate.Range(min=0))
    secondary_serial = fields.String(required=False, load_default=None, allow_none=True)
    opponent_winners = fields.List(
        fields.Nested(OpponentWinnerInputSchema),
        required=False,
        load_default=list,
    )
