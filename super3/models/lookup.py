"""Append-only lookup rows fanned out from winners.

One row per position of a winning ticket and one per winning serial, so
aggregations never have to join through snapshots.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from super3.models.base import Base


class WinningNumberRow(Base):
    __tablename__ = "winning_numbers"

    id: Mapped[str] = mapped_column(String(80), primary_key=True)
    game_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("games.id"), index=True)
    number: Mapped[int] = mapped_column(SmallInteger, nullable=False, index=True)
    is_player_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    game_type: Mapped[str] = mapped_column(String(16), nullable=False)
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class WinningSerialRow(Base):
    __tablename__ = "winning_serials"

    id: Mapped[str] = mapped_column(String(80), primary_key=True)
    game_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("games.id"), index=True)
    serial_number: Mapped[str] = mapped_column(String(64), nullable=False)
    is_player_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    game_type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
