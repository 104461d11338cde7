"""Repository layer for the winning-number and winning-serial lookup tables."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from super3.entities import GameType, NumberFrequency
from super3.models.lookup import WinningNumberRow, WinningSerialRow


class LookupRepository:
    """Append-only rows derived from winners, used for aggregation."""

    def add(
        self,
        session: Session,
        *,
        row_prefix: str,
        game_id: str,
        numbers: Sequence[int],
        serial_number: str,
        is_player_winner: bool,
        game_type: GameType | str,
        created_at: datetime,
    ) -> None:
        game_type_value = GameType(game_type).value
        for position, number in enumerate(numbers):
            session.add(
                WinningNumberRow(
                    id=f"{row_prefix}_{position}",
                    game_id=game_id,
                    number=int(number),
                    is_player_winner=is_player_winner,
                    game_type=game_type_value,
                    position=position,
                    created_at=created_at,
                )
            )
        if serial_number:
            session.add(
                WinningSerialRow(
                    id=f"{row_prefix}_serial",
                    game_id=game_id,
                    serial_number=serial_number,
                    is_player_winner=is_player_winner,
                    game_type=game_type_value,
                    created_at=created_at,
                )
            )

    def winning_number_frequencies(self, session: Session, limit: int | None = None) -> list[NumberFrequency]:
        """Most frequent numbers on winning tickets; ties by ascending number."""

        frequency = func.count().label("frequency")
        stmt = (
            select(WinningNumberRow.number, frequency)
            .group_by(WinningNumberRow.number)
            .order_by(frequency.desc(), WinningNumberRow.number.asc())
        )
        if limit is not None:
            stmt = stmt.limit(int(limit))
        return [NumberFrequency(number=int(n), frequency=int(f)) for n, f in session.execute(stmt).all()]

    def winning_serials(self, session: Session) -> dict[str, list[str]]:
        stmt = select(WinningSerialRow.serial_number, WinningSerialRow.is_player_winner).order_by(
            WinningSerialRow.created_at.desc(), WinningSerialRow.id.asc()
        )
        out: dict[str, list[str]] = {"player": [], "opponent": []}
        for serial, is_player in session.execute(stmt).all():
            out["player" if is_player else "opponent"].append(str(serial))
        return out

    def delete_for_games(self, session: Session, game_ids) -> None:  # type: ignore[no-untyped-def]
        session.execute(delete(WinningNumberRow).where(WinningNumberRow.game_id.in_(game_ids)))
        session.execute(delete(WinningSerialRow).where(WinningSerialRow.game_id.in_(game_ids)))
