"""Winner rows (the user's own tickets and opponents)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from super3.models.base import Base
from super3.models.types import IntList


class WinnerRow(Base):
    __tablename__ = "winners"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    game_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("games.id"), index=True)
    ticket_id: Mapped[str | None] = mapped_column(String(120), nullable=True)
    winning_amount: Mapped[float] = mapped_column(Float, nullable=False)
    game_type: Mapped[str] = mapped_column(String(16), nullable=False)
    is_player_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Copied from the ticket so history does not need the snapshot row.
    custom_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    serial_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    numbers: Mapped[list[int]] = mapped_column(IntList, nullable=True, default=list)


class OpponentWinnerRow(Base):
    __tablename__ = "opponent_winners"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    game_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("games.id"), index=True)
    game_type: Mapped[str] = mapped_column(String(16), nullable=False)
    numbers: Mapped[list[int]] = mapped_column(IntList, nullable=True, default=list)
    serial_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    winning_amount: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
