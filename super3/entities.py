"""Domain entities shared by the store, services and routes.

Entities are frozen dataclasses; mutations go through `dataclasses.replace`
so every change produces a new value.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum


MIN_NUMBER = 1
MAX_NUMBER = 90
TICKET_SIZE = 7

SNAPSHOT_PREFIX = "snapshot_"


class GameType(str, Enum):
    MAIN = "main"
    SECONDARY = "secondary"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def snapshot_id(game_id: str, ticket_id: str) -> str:
    """Derived identity of the frozen copy of `ticket_id` inside `game_id`."""

    return f"{SNAPSHOT_PREFIX}{game_id}_{ticket_id}"


def ticket_number_errors(numbers: Sequence[int]) -> list[str]:
    """Return the reasons `numbers` cannot be stored on a ticket.

    A ticket holds either no numbers or exactly seven distinct numbers in
    1..90.
    """

    errors: list[str] = []
    if len(numbers) not in (0, TICKET_SIZE):
        errors.append(f"A ticket needs exactly {TICKET_SIZE} numbers or none")
    if any(int(n) < MIN_NUMBER or int(n) > MAX_NUMBER for n in numbers):
        errors.append(f"All numbers must be within {MIN_NUMBER}..{MAX_NUMBER}")
    if len(set(numbers)) != len(numbers):
        errors.append("Numbers must be unique")
    return errors


def is_complete_ticket(numbers: Sequence[int], serial_number: str) -> bool:
    return (
        len(numbers) == TICKET_SIZE
        and all(MIN_NUMBER <= int(n) <= MAX_NUMBER for n in numbers)
        and len(set(numbers)) == len(numbers)
        and bool((serial_number or "").strip())
    )


class _TicketNumbersMixin:
    numbers: tuple[int, ...]
    serial_number: str

    @property
    def is_complete(self) -> bool:
        return is_complete_ticket(self.numbers, self.serial_number)

    def contained_in(self, drawn: Iterable[int]) -> bool:
        """True when every number of the ticket has been drawn."""

        drawn_set = set(drawn)
        return bool(self.numbers) and all(n in drawn_set for n in self.numbers)


@dataclass(frozen=True)
class Ticket(_TicketNumbersMixin):
    """A live, editable ticket (a "table" in the game's vocabulary)."""

    id: str
    serial_number: str = ""
    numbers: tuple[int, ...] = ()
    custom_id: str | None = None
    is_checked: bool = False
    created_at: datetime = field(default_factory=utcnow)

    def normalized(self) -> Ticket:
        """Apply the completeness invariant: incomplete tickets are never checked."""

        if self.is_checked and not self.is_complete:
            return replace(self, is_checked=False)
        return self

    def with_changes(self, **changes: object) -> Ticket:
        if "numbers" in changes:
            changes["numbers"] = tuple(int(n) for n in changes["numbers"])  # type: ignore[union-attr]
        return replace(self, **changes).normalized()

    def freeze(self, game_id: str) -> TicketSnapshot:
        return TicketSnapshot(
            id=snapshot_id(game_id, self.id),
            game_id=game_id,
            original_ticket_id=self.id,
            serial_number=self.serial_number,
            numbers=self.numbers,
            custom_id=self.custom_id,
            is_checked=self.is_checked,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class TicketSnapshot(_TicketNumbersMixin):
    """Copy of a ticket frozen when its game finished."""

    id: str
    game_id: str
    original_ticket_id: str
    serial_number: str = ""
    numbers: tuple[int, ...] = ()
    custom_id: str | None = None
    is_checked: bool = True
    created_at: datetime = field(default_factory=utcnow)


AnyTicket = Ticket | TicketSnapshot


@dataclass(frozen=True)
class Game:
    id: str
    tables: tuple[AnyTicket, ...] = ()
    drawn_numbers: tuple[int, ...] = ()
    winner_tables: tuple[AnyTicket, ...] = ()
    game_type: GameType = GameType.MAIN
    is_active: bool = True
    is_opponent_only_mode: bool = False
    started_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None
    tables_played: int = 0

    @property
    def is_finished(self) -> bool:
        return not self.is_active and self.finished_at is not None

    @property
    def sorted_drawn_numbers(self) -> list[int]:
        return sorted(self.drawn_numbers)


@dataclass(frozen=True)
class Winner:
    id: str
    game_id: str
    ticket: AnyTicket
    winning_amount: float
    game_type: GameType = GameType.MAIN
    is_player_winner: bool = True
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class OpponentWinnerData:
    """Input describing a competitor's result."""

    game_type: GameType = GameType.MAIN
    numbers: tuple[int, ...] = ()
    serial_number: str = ""
    winning_amount: float = 0.0
    notes: str = ""


@dataclass(frozen=True)
class OpponentWinner:
    id: str
    game_id: str
    game_type: GameType
    numbers: tuple[int, ...]
    serial_number: str
    winning_amount: float
    notes: str = ""
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    game: Game
    winners: tuple[Winner, ...] = ()
    opponent_winners: tuple[OpponentWinner, ...] = ()
    total_cost: float = 0.0
    total_winnings: float = 0.0
    total_opponent_winnings: float = 0.0
    net_profit: float = 0.0
    created_at: datetime = field(default_factory=utcnow)
    tables_played: int = 0


@dataclass(frozen=True)
class NumberFrequency:
    number: int
    frequency: int


@dataclass(frozen=True)
class NumberRecommendation:
    number: int
    score: int
    sources: tuple[str, ...] = ()
