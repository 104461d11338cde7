"""History routes."""

from __future__ import annotations

from flask import Blueprint

from super3.schemas.history import HistoryEntrySchema
from super3.services.game_coordinator import get_coordinator
from super3.utils.responses import ok

history_bp = Blueprint("history", __name__)

_history_schema = HistoryEntrySchema(many=True)


@history_bp.get("/history")
def list_history():
    return ok(_history_schema.dump(get_coordinator().state.history))


@history_bp.delete("/history")
def clear_history():
    get_coordinator().clear_game_history()
    return ok({"cleared": True})


@history_bp.delete("/history/<history_id>")
def delete_history_entry(history_id: str):
    get_coordinator().delete_history_entry(history_id)
    return ok({"deleted": history_id})
