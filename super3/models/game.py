"""Game (draw session) rows and the game/ticket join table."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from super3.models.base import Base
from super3.models.types import IntList, StrList


class GameRow(Base):
    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    drawn_numbers: Mapped[list[int]] = mapped_column(IntList, nullable=False, default=list)
    game_type: Mapped[str] = mapped_column(String(16), nullable=False, default="main")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_opponent_only_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    winner_ticket_ids: Mapped[list[str]] = mapped_column(StrList, nullable=True, default=list)
    tables_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class GameTicketRow(Base):
    """Links a game to the tickets it was played with.

    Active games point at live ticket ids; finished games point at snapshots.
    """

    __tablename__ = "game_tickets"

    game_id: Mapped[str] = mapped_column(String(64), ForeignKey("games.id"), primary_key=True)
    ticket_id: Mapped[str] = mapped_column(String(120), primary_key=True)
