"""Schemas for statistics, balance and recommendations."""

from __future__ import annotations

from marshmallow import Schema, fields

from super3.schemas.history import HistoryEntrySchema


class NumberFrequencySchema(Schema):
    number = fields.Integer()
    frequency = fields.Integer()


class SerialMarginsSchema(Schema):
    min = fields.Integer()
    max = fields.Integer()
    average = fields.Integer()


class GameStatsSchema(Schema):
    total_games = fields.Integer()
    total_registered_games = fields.Integer()
    total_tables_played = fields.Integer()
    games_won = fields.Integer()
    total_spent = fields.Float()
    total_won = fields.Float()
    net_profit = fields.Float()
    roi = fields.Float()
    win_rate = fields.Float()
    average_numbers_drawn = fields.Float()
    most_frequent_numbers = fields.List(fields.Nested(NumberFrequencySchema))
    top_early_numbers = fields.List(fields.Nested(NumberFrequencySchema))
    top_winning_numbers = fields.List(fields.Nested(NumberFrequencySchema))
    winning_serial_numbers = fields.Dict(keys=fields.String(), values=fields.List(fields.String()))
    serial_number_margins = fields.Nested(SerialMarginsSchema)


class BalanceSchema(Schema):
    total_spent = fields.Float()
    total_won = fields.Float()
    net_profit = fields.Float()
    total_games = fields.Integer()
    winning_games = fields.Integer()
    average_spent_per_game = fields.Float()
    average_won_per_game = fields.Float()
    best_game = fields.Nested(HistoryEntrySchema, allow_none=True)
    worst_game = fields.Nested(HistoryEntrySchema, allow_none=True)


class RecommendationSchema(Schema):
    number = fields.Integer()
    score = fields.Integer()
    sources = fields.List(fields.String())
