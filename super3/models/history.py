"""History summary row, one per finished game."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from super3.models.base import Base


class HistoryRow(Base):
    __tablename__ = "history"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    game_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("games.id"), index=True)
    total_cost: Mapped[float] = mapped_column(Float, nullable=False)
    total_winnings: Mapped[float] = mapped_column(Float, nullable=False)
    total_opponent_winnings: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    net_profit: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
