"""ORM models."""

from super3.models.game import GameRow, GameTicketRow
from super3.models.history import HistoryRow
from super3.models.lookup import WinningNumberRow, WinningSerialRow
from super3.models.schema_version import SchemaVersion
from super3.models.ticket import LiveTicketRow, TicketRow, TicketSnapshotRow
from super3.models.winner import OpponentWinnerRow, WinnerRow

__all__ = [
    "GameRow",
    "GameTicketRow",
    "HistoryRow",
    "LiveTicketRow",
    "OpponentWinnerRow",
    "SchemaVersion",
    "TicketRow",
    "TicketSnapshotRow",
    "WinnerRow",
    "WinningNumberRow",
    "WinningSerialRow",
]
