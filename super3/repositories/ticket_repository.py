"""Repository layer for live tickets and ticket snapshots."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from super3.entities import Ticket, TicketSnapshot
from super3.models.game import GameTicketRow
from super3.models.ticket import LiveTicketRow, TicketRow, TicketSnapshotRow
from super3.repositories._mapping import aware


def _to_ticket(row: TicketRow) -> Ticket:
    return Ticket(
        id=row.id,
        custom_id=row.custom_id,
        serial_number=row.serial_number or "",
        numbers=tuple(row.numbers or ()),
        is_checked=bool(row.is_checked),
        created_at=aware(row.created_at),
    )


def _to_snapshot(row: TicketSnapshotRow) -> TicketSnapshot:
    return TicketSnapshot(
        id=row.id,
        game_id=row.game_id or "",
        original_ticket_id=row.original_ticket_id or "",
        custom_id=row.custom_id,
        serial_number=row.serial_number or "",
        numbers=tuple(row.numbers or ()),
        is_checked=bool(row.is_checked),
        created_at=aware(row.created_at),
    )


class TicketRepository:
    """CRUD operations for tickets."""

    def list_live(self, session: Session) -> list[Ticket]:
        stmt = select(LiveTicketRow).order_by(LiveTicketRow.created_at.asc(), LiveTicketRow.id.asc())
        return [_to_ticket(row) for row in session.scalars(stmt).all()]

    def get_live(self, session: Session, ticket_id: str) -> Ticket | None:
        row = session.get(LiveTicketRow, ticket_id)
        return _to_ticket(row) if row is not None else None

    def save_live(self, session: Session, ticket: Ticket) -> Ticket:
        session.merge(
            LiveTicketRow(
                id=ticket.id,
                custom_id=ticket.custom_id,
                serial_number=ticket.serial_number,
                numbers=list(ticket.numbers),
                is_checked=ticket.is_checked,
                is_complete=ticket.is_complete,
                created_at=ticket.created_at,
            )
        )
        return ticket

    def delete_live(self, session: Session, ticket_id: str) -> int:
        result = session.execute(
            delete(TicketRow).where(TicketRow.kind == "live", TicketRow.id == ticket_id)
        )
        return int(result.rowcount or 0)

    def delete_all_live(self, session: Session) -> int:
        result = session.execute(delete(TicketRow).where(TicketRow.kind == "live"))
        return int(result.rowcount or 0)

    def save_snapshot(self, session: Session, snapshot: TicketSnapshot) -> TicketSnapshot:
        session.merge(
            TicketSnapshotRow(
                id=snapshot.id,
                game_id=snapshot.game_id,
                original_ticket_id=snapshot.original_ticket_id,
                custom_id=snapshot.custom_id,
                serial_number=snapshot.serial_number,
                numbers=list(snapshot.numbers),
                is_checked=snapshot.is_checked,
                is_complete=snapshot.is_complete,
                created_at=snapshot.created_at,
            )
        )
        return snapshot

    def list_for_game(self, session: Session, game_id: str) -> Sequence[Ticket | TicketSnapshot]:
        """Tickets linked to a game: snapshots once finished, live rows while active."""

        stmt = (
            select(TicketRow)
            .join(GameTicketRow, GameTicketRow.ticket_id == TicketRow.id)
            .where(GameTicketRow.game_id == game_id)
            .order_by(TicketRow.created_at.asc(), TicketRow.id.asc())
        )
        out: list[Ticket | TicketSnapshot] = []
        for row in session.scalars(stmt).all():
            if isinstance(row, TicketSnapshotRow):
                out.append(_to_snapshot(row))
            else:
                out.append(_to_ticket(row))
        return out

    def list_snapshots(self, session: Session, game_id: str) -> list[TicketSnapshot]:
        stmt = (
            select(TicketSnapshotRow)
            .where(TicketSnapshotRow.game_id == game_id)
            .order_by(TicketSnapshotRow.created_at.asc(), TicketSnapshotRow.id.asc())
        )
        return [_to_snapshot(row) for row in session.scalars(stmt).all()]
