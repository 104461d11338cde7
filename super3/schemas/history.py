"""Schemas for history entries."""

from __future__ import annotations

from marshmallow import Schema, fields

from super3.schemas.game import GameSchema, OpponentWinnerSchema, WinnerSchema


class HistoryEntrySchema(Schema):
    id = fields.String()
    game = fields.Nested(GameSchema)
    winners = fields.List(fields.Nested(WinnerSchema))
    opponent_winners = fields.List(fields.Nested(OpponentWinnerSchema))
    total_cost = fields.Float()
    total_winnings = fields.Float()
    total_opponent_winnings = fields.Float()
    net_profit = fields.Float()
    created_at = fields.DateTime()
    tables_played = fields.Integer()
