"""Ticket rows.

Live tickets and their per-game snapshots share the `tickets` table and are
told apart by the `kind` discriminator.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from super3.models.base import Base
from super3.models.types import IntList


class TicketRow(Base):
    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String(120), primary_key=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, default="live", index=True)
    custom_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    serial_number: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    numbers: Mapped[list[int]] = mapped_column(IntList, nullable=False, default=list)
    is_checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Only set on snapshots.
    game_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    original_ticket_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __mapper_args__ = {"polymorphic_on": "kind"}


class LiveTicketRow(TicketRow):
    """A ticket the user is currently editing or playing."""

    __mapper_args__ = {"polymorphic_identity": "live"}


class TicketSnapshotRow(TicketRow):
    """A ticket frozen at game-finish time."""

    __mapper_args__ = {"polymorphic_identity": "snapshot"}
