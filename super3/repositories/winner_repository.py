"""Repository layer for player and opponent winners.

Saving a winner also fans its numbers and serial out into the
`winning_numbers` / `winning_serials` lookup tables.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from super3.entities import GameType, OpponentWinner, TicketSnapshot, Winner, snapshot_id
from super3.models.winner import OpponentWinnerRow, WinnerRow
from super3.repositories._mapping import aware, deferred, optional
from super3.repositories.lookup_repository import LookupRepository


class WinnerRepository:
    """Persistence for winners and their denormalized lookup rows."""

    def __init__(
        self,
        lookups: LookupRepository | None = None,
        missing_columns: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self._lookups = lookups or LookupRepository()
        self._missing = set((missing_columns or {}).get("winners", ()))

    def save_winner(self, session: Session, winner: Winner) -> None:
        ticket = winner.ticket
        original_id = ticket.original_ticket_id if isinstance(ticket, TicketSnapshot) else ticket.id
        session.add(
            WinnerRow(
                id=winner.id,
                game_id=winner.game_id,
                ticket_id=snapshot_id(winner.game_id, original_id),
                winning_amount=float(winner.winning_amount),
                game_type=GameType(winner.game_type).value,
                is_player_winner=winner.is_player_winner,
                created_at=winner.created_at,
                custom_id=ticket.custom_id or "",
                serial_number=ticket.serial_number,
                numbers=list(ticket.numbers),
            )
        )
        self._lookups.add(
            session,
            row_prefix=winner.id,
            game_id=winner.game_id,
            numbers=ticket.numbers,
            serial_number=ticket.serial_number,
            is_player_winner=winner.is_player_winner,
            game_type=winner.game_type,
            created_at=winner.created_at,
        )

    def save_opponent_winner(self, session: Session, opponent: OpponentWinner) -> None:
        session.add(
            OpponentWinnerRow(
                id=opponent.id,
                game_id=opponent.game_id,
                game_type=GameType(opponent.game_type).value,
                numbers=list(opponent.numbers),
                serial_number=opponent.serial_number,
                winning_amount=float(opponent.winning_amount),
                notes=opponent.notes,
                created_at=opponent.created_at,
            )
        )
        self._lookups.add(
            session,
            row_prefix=opponent.id,
            game_id=opponent.game_id,
            numbers=opponent.numbers,
            serial_number=opponent.serial_number,
            is_player_winner=False,
            game_type=opponent.game_type,
            created_at=opponent.created_at,
        )

    def list_for_game(self, session: Session, game_id: str) -> list[Winner]:
        stmt = (
            select(WinnerRow)
            .options(*deferred(WinnerRow, self._missing))
            .where(WinnerRow.game_id == game_id)
            .order_by(WinnerRow.created_at.asc(), WinnerRow.id.asc())
        )
        out: list[Winner] = []
        for row in session.scalars(stmt).all():
            created_at = aware(row.created_at)
            ticket_id = row.ticket_id or ""
            original_id = ticket_id.removeprefix(f"snapshot_{game_id}_")
            out.append(
                Winner(
                    id=row.id,
                    game_id=game_id,
                    ticket=TicketSnapshot(
                        id=ticket_id,
                        game_id=game_id,
                        original_ticket_id=original_id,
                        custom_id=optional(row, "custom_id", self._missing, None) or None,
                        serial_number=optional(row, "serial_number", self._missing, ""),
                        numbers=tuple(optional(row, "numbers", self._missing, [])),
                        is_checked=True,
                        created_at=created_at,
                    ),
                    winning_amount=float(row.winning_amount),
                    game_type=GameType(row.game_type),
                    is_player_winner=bool(row.is_player_winner),
                    created_at=created_at,
                )
            )
        return out

    def list_opponents_for_game(self, session: Session, game_id: str) -> list[OpponentWinner]:
        stmt = (
            select(OpponentWinnerRow)
            .where(OpponentWinnerRow.game_id == game_id)
            .order_by(OpponentWinnerRow.created_at.asc(), OpponentWinnerRow.id.asc())
        )
        return [
            OpponentWinner(
                id=row.id,
                game_id=game_id,
                game_type=GameType(row.game_type),
                numbers=tuple(row.numbers or ()),
                serial_number=row.serial_number or "",
                winning_amount=float(row.winning_amount),
                notes=row.notes or "",
                created_at=aware(row.created_at),
            )
            for row in session.scalars(stmt).all()
        ]

    def delete_for_games(self, session: Session, game_ids) -> None:  # type: ignore[no-untyped-def]
        """Delete winners, opponent winners and lookups of `game_ids` (ids or a subquery)."""

        self._lookups.delete_for_games(session, game_ids)
        session.execute(delete(OpponentWinnerRow).where(OpponentWinnerRow.game_id.in_(game_ids)))
        session.execute(delete(WinnerRow).where(WinnerRow.game_id.in_(game_ids)))
