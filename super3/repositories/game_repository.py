"""Repository layer for games and their ticket links."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from super3.entities import AnyTicket, Game, GameType
from super3.models.game import GameRow, GameTicketRow
from super3.repositories._mapping import aware, deferred, optional


class GameRepository:
    """Persistence for games (draw sessions)."""

    def __init__(self, missing_columns: Mapping[str, Iterable[str]] | None = None) -> None:
        self._missing = set((missing_columns or {}).get("games", ()))

    def load_options(self) -> list:
        return deferred(GameRow, self._missing)

    def save(self, session: Session, game: Game) -> None:
        session.merge(
            GameRow(
                id=game.id,
                drawn_numbers=list(game.drawn_numbers),
                winner_ticket_ids=[t.id for t in game.winner_tables],
                game_type=GameType(game.game_type).value,
                is_active=game.is_active,
                is_opponent_only_mode=game.is_opponent_only_mode,
                started_at=game.started_at,
                finished_at=game.finished_at,
                tables_played=game.tables_played,
            )
        )

    def replace_ticket_links(self, session: Session, game_id: str, ticket_ids: Iterable[str]) -> None:
        session.execute(delete(GameTicketRow).where(GameTicketRow.game_id == game_id))
        # Flush the delete before re-inserting the same composite keys.
        session.flush()
        for ticket_id in dict.fromkeys(ticket_ids):
            session.add(GameTicketRow(game_id=game_id, ticket_id=ticket_id))

    def to_game(
        self,
        row: GameRow,
        tables: Iterable[AnyTicket] = (),
        winner_tables: Iterable[AnyTicket] = (),
    ) -> Game:
        return Game(
            id=row.id,
            tables=tuple(tables),
            drawn_numbers=tuple(row.drawn_numbers or ()),
            winner_tables=tuple(winner_tables),
            game_type=GameType(row.game_type or GameType.MAIN.value),
            is_active=bool(row.is_active),
            is_opponent_only_mode=bool(optional(row, "is_opponent_only_mode", self._missing, False)),
            started_at=aware(row.started_at),
            finished_at=aware(row.finished_at),
            tables_played=int(optional(row, "tables_played", self._missing, 0)),
        )

    def count_finished(self, session: Session) -> int:
        stmt = select(func.count()).select_from(GameRow).where(GameRow.finished_at.is_not(None))
        return int(session.scalar(stmt) or 0)

    def finished_draw_sequences(self, session: Session) -> list[list[int]]:
        """Drawn numbers of every finished game, oldest game first."""

        stmt = (
            select(GameRow.drawn_numbers)
            .where(GameRow.finished_at.is_not(None))
            .order_by(GameRow.finished_at.asc())
        )
        return [list(numbers or ()) for numbers in session.scalars(stmt).all()]

    def delete(self, session: Session, game_id: str) -> None:
        session.execute(delete(GameTicketRow).where(GameTicketRow.game_id == game_id))
        session.execute(delete(GameRow).where(GameRow.id == game_id))

    def delete_finished(self, session: Session) -> None:
        finished = select(GameRow.id).where(GameRow.finished_at.is_not(None))
        session.execute(delete(GameTicketRow).where(GameTicketRow.game_id.in_(finished)))
        session.execute(delete(GameRow).where(GameRow.finished_at.is_not(None)))
