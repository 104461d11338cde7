"""Live game routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from super3.schemas.game import (
    DrawNumberSchema,
    FinishGameSchema,
    GameSchema,
    OpponentWinnerInputSchema,
    OpponentWinnerSchema,
    StartGameSchema,
)
from super3.schemas.history import HistoryEntrySchema
from super3.schemas.ticket import TicketSchema
from super3.services.game_coordinator import get_coordinator
from super3.utils.responses import ok

game_bp = Blueprint("game", __name__)

_game_schema = GameSchema()
_start_schema = StartGameSchema()
_draw_schema = DrawNumberSchema()
_finish_schema = FinishGameSchema()
_opponent_input_schema = OpponentWinnerInputSchema()
_opponent_schema = OpponentWinnerSchema()
_opponents_schema = OpponentWinnerSchema(many=True)
_tickets_schema = TicketSchema(many=True)
_history_schema = HistoryEntrySchema()


def _game_payload():
    state = get_coordinator().state
    game = state.current_game
    return {
        "phase": state.phase.value,
        "game": _game_schema.dump(game) if game is not None else None,
        "opponent_winners": _opponents_schema.dump(state.game_opponent_winners),
    }


@game_bp.get("/game")
def current_game():
    return ok(_game_payload())


@game_bp.post("/game/start")
def start_game():
    data = _start_schema.load(request.get_json(silent=True) or {})
    get_coordinator().start_game(opponent_only=bool(data["opponent_only"]))
    return ok(_game_payload(), status_code=201)


@game_bp.post("/game/draws")
def add_drawn_number():
    data = _draw_schema.load(request.get_json(silent=True) or {})
    get_coordinator().add_drawn_number(int(data["number"]))
    return ok(_game_payload())


@game_bp.delete("/game/draws/<int:number>")
def remove_drawn_number(number: int):
    get_coordinator().remove_drawn_number(number)
    return ok(_game_payload())


@game_bp.get("/game/winners")
def winning_tickets():
    return ok(_tickets_schema.dump(get_coordinator().state.winning_tickets))


@game_bp.post("/game/opponent-winners")
def add_opponent_winner():
    data = _opponent_input_schema.load(request.get_json(silent=True) or {})
    opponent = get_coordinator().save_opponent_winner(data)
    return ok(_opponent_schema.dump(opponent), status_code=201)


@game_bp.post("/game/finish")
def finish_game():
    data = _finish_schema.load(request.get_json(silent=True) or {})
    entry = get_coordinator().settle_game(
        main_amount=float(data["main_amount"]),
        secondary_amount=float(data["secondary_amount"]),
        secondary_serial=data.get("secondary_serial"),
        opponent_winners=data["opponent_winners"],
    )
    return ok(_history_schema.dump(entry))
