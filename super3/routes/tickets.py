"""Ticket routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from super3.errors import NotFoundError
from super3.schemas.ticket import (
    TicketBatchCreateSchema,
    TicketFillSchema,
    TicketSchema,
    TicketStatsSchema,
    TicketUpdateSchema,
)
from super3.services.game_coordinator import get_coordinator
from super3.utils.responses import ok

tickets_bp = Blueprint("tickets", __name__)

_ticket_schema = TicketSchema()
_tickets_schema = TicketSchema(many=True)
_update_schema = TicketUpdateSchema()
_batch_schema = TicketBatchCreateSchema()
_fill_schema = TicketFillSchema()
_stats_schema = TicketStatsSchema()

# Bulk operations exposed under /tickets/actions/<action>.
_ACTIONS = {
    "fill-numbers": "fill_all_tickets_with_numbers",
    "fill-identifiers": "fill_all_identifiers",
    "clear-identifiers": "clear_all_identifiers",
    "clear-numbers": "clear_all_numbers",
    "check-complete": "mark_all_complete_checked",
    "uncheck-all": "uncheck_all_tickets",
    "delete-incomplete": "delete_incomplete_tickets",
}


@tickets_bp.get("/tickets")
def list_tickets():
    return ok(_tickets_schema.dump(get_coordinator().state.tickets))


@tickets_bp.post("/tickets")
def create_ticket():
    ticket = get_coordinator().create_ticket()
    return ok(_ticket_schema.dump(ticket), status_code=201)


@tickets_bp.post("/tickets/batch")
def create_tickets():
    data = _batch_schema.load(request.get_json(silent=True) or {})
    tickets = get_coordinator().create_tickets(int(data["count"]))
    return ok(_tickets_schema.dump(tickets), status_code=201)


@tickets_bp.delete("/tickets")
def clear_tickets():
    removed = get_coordinator().clear_all_tickets()
    return ok({"deleted": removed})


@tickets_bp.get("/tickets/stats")
def ticket_stats():
    return ok(_stats_schema.dump(get_coordinator().ticket_stats()))


@tickets_bp.get("/tickets/serial-exists")
def serial_exists():
    serial = request.args.get("serial_number", "")
    exclude_id = request.args.get("exclude_id") or None
    return ok({"exists": get_coordinator().check_serial_number_exists(serial, exclude_id)})


@tickets_bp.post("/tickets/actions/<action>")
def run_action(action: str):
    method = _ACTIONS.get(action)
    if method is None:
        raise NotFoundError(message=f"Unknown ticket action {action}")

    coordinator = get_coordinator()
    if action == "fill-numbers":
        data = _fill_schema.load(request.get_json(silent=True) or {})
        if data.get("limit"):
            changed = coordinator.fill_tickets_with_numbers(int(data["limit"]))
            return ok({"changed": changed})

    changed = getattr(coordinator, method)()
    return ok({"changed": changed})


@tickets_bp.get("/tickets/<ticket_id>")
def get_ticket(ticket_id: str):
    for ticket in get_coordinator().state.tickets:
        if ticket.id == ticket_id:
            return ok(_ticket_schema.dump(ticket))
    raise NotFoundError(message=f"Ticket {ticket_id} not found")


@tickets_bp.put("/tickets/<ticket_id>")
def update_ticket(ticket_id: str):
    changes = _update_schema.load(request.get_json(silent=True) or {})
    ticket = get_coordinator().update_ticket(ticket_id, changes)
    return ok(_ticket_schema.dump(ticket))


@tickets_bp.delete("/tickets/<ticket_id>")
def delete_ticket(ticket_id: str):
    get_coordinator().delete_ticket(ticket_id)
    return ok({"deleted": ticket_id})
