"""Repository layer for history summary rows."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from super3.entities import HistoryEntry
from super3.models.game import GameRow
from super3.models.history import HistoryRow
from super3.repositories._mapping import deferred


class HistoryRepository:
    """Persistence for history entries (summary rows only)."""

    def __init__(self, missing_columns: Mapping[str, Iterable[str]] | None = None) -> None:
        self._missing = set((missing_columns or {}).get("history", ()))

    def save(self, session: Session, entry: HistoryEntry) -> None:
        session.add(
            HistoryRow(
                id=entry.id,
                game_id=entry.game.id,
                total_cost=float(entry.total_cost),
                total_winnings=float(entry.total_winnings),
                total_opponent_winnings=float(entry.total_opponent_winnings),
                net_profit=float(entry.net_profit),
                created_at=entry.created_at,
            )
        )

    def list_with_games(self, session: Session, game_options: Iterable = ()) -> list[tuple[HistoryRow, GameRow]]:
        """History rows joined with their game, newest first."""

        stmt = (
            select(HistoryRow, GameRow)
            .join(GameRow, HistoryRow.game_id == GameRow.id)
            .options(*deferred(HistoryRow, self._missing), *game_options)
            .order_by(HistoryRow.created_at.desc(), HistoryRow.id.desc())
        )
        return [(h, g) for h, g in session.execute(stmt).all()]

    def total_opponent_winnings(self, row: HistoryRow) -> float:
        if "total_opponent_winnings" in self._missing:
            return 0.0
        return float(row.total_opponent_winnings or 0.0)

    def get_game_id(self, session: Session, history_id: str) -> str | None:
        row = session.get(HistoryRow, history_id, options=deferred(HistoryRow, self._missing))
        return row.game_id if row is not None else None

    def delete(self, session: Session, history_id: str) -> None:
        session.execute(delete(HistoryRow).where(HistoryRow.id == history_id))

    def delete_all(self, session: Session) -> None:
        session.execute(delete(HistoryRow))
