"""Application state coordinator.

Holds a read cache of the store (tickets, the live game, history) as an
immutable `CoordinatorState` that is replaced on every transition, and runs
every command against the `EntityStore` one at a time.

Game lifecycle: NO_GAME -> ACTIVE (draws are added/removed in memory) ->
finished (snapshots, winners and history are written) -> NO_GAME.
"""

from __future__ import annotations

import functools
import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum
from typing import Any, TypeVar

from flask import current_app

from super3.entities import (
    MAX_NUMBER,
    MIN_NUMBER,
    TICKET_SIZE,
    Game,
    GameType,
    HistoryEntry,
    NumberRecommendation,
    OpponentWinner,
    OpponentWinnerData,
    Ticket,
    Winner,
    ticket_number_errors,
    utcnow,
)
from super3.errors import AppError, ConflictError, GameStateError, NotFoundError, ValidationError
from super3.services.recommendation_service import RecommendationService
from super3.services.statistics_service import BalanceSummary, GameStats, StatisticsService
from super3.services.store import EntityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GamePhase(str, Enum):
    NO_GAME = "no_game"
    ACTIVE = "active"


@dataclass(frozen=True)
class CoordinatorState:
    tickets: tuple[Ticket, ...] = ()
    current_game: Game | None = None
    winning_tickets: tuple[Ticket, ...] = ()
    game_opponent_winners: tuple[OpponentWinner, ...] = ()
    history: tuple[HistoryEntry, ...] = ()

    @property
    def phase(self) -> GamePhase:
        return GamePhase.ACTIVE if self.current_game is not None else GamePhase.NO_GAME


@dataclass(frozen=True)
class TicketStats:
    total: int
    complete: int
    incomplete: int
    checked: int
    total_cost: float


def _serialized(method: Callable[..., T]) -> Callable[..., T]:
    @functools.wraps(method)
    def wrapper(self: GameCoordinator, *args: Any, **kwargs: Any) -> T:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class GameCoordinator:
    """Commands for tickets, the live game and history."""

    def __init__(
        self,
        store: EntityStore,
        *,
        unit_cost: float = 0.25,
        max_tickets: int = 200,
        recommendation_size: int = TICKET_SIZE,
        bulk_fill_limit: int = 20,
        early_draw_window: int = 25,
    ) -> None:
        self._store = store
        self._unit_cost = float(unit_cost)
        self._max_tickets = int(max_tickets)
        self._recommendation_size = int(recommendation_size)
        self._bulk_fill_limit = int(bulk_fill_limit)
        self._recommendations = RecommendationService(store, early_draw_window=early_draw_window)
        self._statistics = StatisticsService(early_draw_window=early_draw_window)
        self._lock = threading.RLock()
        self._state = CoordinatorState()

    @property
    def state(self) -> CoordinatorState:
        return self._state

    def _set(self, **changes: Any) -> CoordinatorState:
        self._state = replace(self._state, **changes)
        return self._state

    @_serialized
    def load_data(self) -> CoordinatorState:
        """Rebuild the cache from the store (the live game is kept)."""

        return self._set(
            tickets=tuple(self._store.get_tickets()),
            history=tuple(self._store.get_game_history()),
        )

    # -- tickets ----------------------------------------------------------

    def _find_ticket(self, ticket_id: str) -> Ticket:
        for ticket in self._state.tickets:
            if ticket.id == ticket_id:
                return ticket
        raise NotFoundError(message=f"Ticket {ticket_id} not found")

    def _put_ticket(self, ticket: Ticket) -> Ticket:
        ticket = ticket.normalized()
        self._store.save_ticket(ticket)
        tickets = self._state.tickets
        if any(t.id == ticket.id for t in tickets):
            self._set(tickets=tuple(ticket if t.id == ticket.id else t for t in tickets))
        else:
            self._set(tickets=tickets + (ticket,))
        return ticket

    def _next_custom_ids(self, count: int) -> list[str]:
        used = set()
        for ticket in self._state.tickets:
            try:
                used.add(int(ticket.custom_id or ""))
            except ValueError:
                continue
        out: list[str] = []
        candidate = 1
        while len(out) < count:
            if candidate not in used:
                out.append(str(candidate))
                used.add(candidate)
            candidate += 1
        return out

    def _bulk(self, operation: str, action: Callable[[], T]) -> T:
        """Run `action` in one store transaction; resync the cache if it fails."""

        try:
            with self._store.batch(operation):
                return action()
        except AppError:
            self._set(tickets=tuple(self._store.get_tickets()))
            raise

    @_serialized
    def create_ticket(self) -> Ticket:
        if len(self._state.tickets) >= self._max_tickets:
            raise ValidationError(f"Maximum {self._max_tickets} tickets allowed")

        ticket = Ticket(id=uuid.uuid4().hex, custom_id=self._next_custom_ids(1)[0])
        return self._put_ticket(ticket)

    @_serialized
    def create_tickets(self, count: int) -> list[Ticket]:
        if count <= 0:
            raise ValidationError("count must be positive")
        to_create = min(int(count), self._max_tickets - len(self._state.tickets))
        if to_create <= 0:
            raise ValidationError(f"Maximum {self._max_tickets} tickets allowed")

        base = utcnow()
        custom_ids = self._next_custom_ids(to_create)

        def _create() -> list[Ticket]:
            return [
                self._put_ticket(
                    Ticket(
                        id=uuid.uuid4().hex,
                        custom_id=custom_ids[i],
                        created_at=base + timedelta(microseconds=i),
                    )
                )
                for i in range(to_create)
            ]

        return self._bulk("create_tickets", _create)

    @_serialized
    def update_ticket(self, ticket_id: str, changes: Mapping[str, Any]) -> Ticket:
        """Apply field changes to a ticket.

        Accepted keys: custom_id, serial_number, numbers, is_checked. A ticket
        that ends up incomplete is always stored unchecked.
        """

        ticket = self._find_ticket(ticket_id)
        fields: dict[str, Any] = {}

        if "numbers" in changes:
            numbers = [int(n) for n in (changes["numbers"] or ())]
            errors = ticket_number_errors(numbers)
            if errors:
                raise ValidationError("Invalid ticket numbers", details={"numbers": errors})
            fields["numbers"] = sorted(numbers)

        if "serial_number" in changes:
            serial = str(changes["serial_number"] or "").strip()
            if serial and self._serial_taken(serial, ticket.id):
                raise ConflictError(
                    "Serial number already exists", details={"serial_number": [serial]}
                )
            fields["serial_number"] = serial

        if "custom_id" in changes:
            fields["custom_id"] = str(changes["custom_id"] or "").strip() or None

        if "is_checked" in changes:
            fields["is_checked"] = bool(changes["is_checked"])

        return self._put_ticket(ticket.with_changes(**fields))

    @_serialized
    def delete_ticket(self, ticket_id: str) -> None:
        self._find_ticket(ticket_id)
        self._store.delete_ticket(ticket_id)
        self._set(tickets=tuple(t for t in self._state.tickets if t.id != ticket_id))

    @_serialized
    def clear_all_tickets(self) -> int:
        removed = self._store.clear_all_tickets()
        self._set(tickets=())
        return removed

    def _recommended_fill(self) -> tuple[int, ...]:
        if not self._recommendations.has_statistical_data():
            raise ValidationError("No statistics available to recommend numbers")
        numbers = self._recommendations.recommend_numbers(self._recommendation_size)
        if len(numbers) != TICKET_SIZE:
            raise ValidationError("Not enough statistics to recommend a full ticket")
        return tuple(sorted(numbers))

    def _fill_empty(self, operation: str, limit: int | None) -> int:
        numbers = self._recommended_fill()
        empty = [t for t in self._state.tickets if not t.numbers]
        if limit is not None:
            empty = empty[:limit]

        def _fill() -> int:
            for ticket in empty:
                self._put_ticket(ticket.with_changes(numbers=numbers))
            return len(empty)

        return self._bulk(operation, _fill)

    @_serialized
    def fill_all_tickets_with_numbers(self) -> int:
        """Give every empty ticket the recommended numbers."""

        return self._fill_empty("fill_all_tickets_with_numbers", None)

    @_serialized
    def fill_tickets_with_numbers(self, limit: int | None = None) -> int:
        """Like `fill_all_tickets_with_numbers` but for the first `limit` empty tickets."""

        return self._fill_empty("fill_tickets_with_numbers", limit or self._bulk_fill_limit)

    def _rewrite(self, operation: str, change: Callable[[int, Ticket], Ticket | None]) -> int:
        """Save every ticket for which `change` returns a new value."""

        def _apply() -> int:
            changed = 0
            for position, ticket in enumerate(self._state.tickets):
                updated = change(position, ticket)
                if updated is not None:
                    self._put_ticket(updated)
                    changed += 1
            return changed

        return self._bulk(operation, _apply)

    @_serialized
    def fill_all_identifiers(self) -> int:
        """Label tickets without a custom id by their 1-based position."""

        return self._rewrite(
            "fill_all_identifiers",
            lambda i, t: None if t.custom_id else t.with_changes(custom_id=str(i + 1)),
        )

    @_serialized
    def clear_all_identifiers(self) -> int:
        return self._rewrite(
            "clear_all_identifiers",
            lambda i, t: t.with_changes(custom_id=None) if t.custom_id else None,
        )

    @_serialized
    def clear_all_numbers(self) -> int:
        return self._rewrite(
            "clear_all_numbers",
            lambda i, t: t.with_changes(numbers=()) if t.numbers else None,
        )

    @_serialized
    def mark_all_complete_checked(self) -> int:
        return self._rewrite(
            "mark_all_complete_checked",
            lambda i, t: t.with_changes(is_checked=True) if t.is_complete and not t.is_checked else None,
        )

    @_serialized
    def uncheck_all_tickets(self) -> int:
        return self._rewrite(
            "uncheck_all_tickets",
            lambda i, t: t.with_changes(is_checked=False) if t.is_checked else None,
        )

    @_serialized
    def delete_incomplete_tickets(self) -> int:
        incomplete = [t.id for t in self._state.tickets if not t.is_complete]

        def _delete() -> int:
            for ticket_id in incomplete:
                self._store.delete_ticket(ticket_id)
            self._set(tickets=tuple(t for t in self._state.tickets if t.is_complete))
            return len(incomplete)

        return self._bulk("delete_incomplete_tickets", _delete)

    def ticket_stats(self) -> TicketStats:
        tickets = self._state.tickets
        complete = sum(1 for t in tickets if t.is_complete)
        return TicketStats(
            total=len(tickets),
            complete=complete,
            incomplete=len(tickets) - complete,
            checked=sum(1 for t in tickets if t.is_checked),
            total_cost=len(tickets) * self._unit_cost,
        )

    def _serial_taken(self, serial: str, exclude_id: str | None) -> bool:
        return any(t.serial_number == serial and t.id != exclude_id for t in self._state.tickets)

    def check_serial_number_exists(self, serial_number: str, exclude_id: str | None = None) -> bool:
        """True when another live ticket already uses `serial_number`."""

        serial = (serial_number or "").strip()
        if not serial:
            return False
        return self._serial_taken(serial, exclude_id)

    # -- game -------------------------------------------------------------

    def _active_game(self) -> Game:
        game = self._state.current_game
        if game is None:
            raise GameStateError("No active game")
        return game

    @_serialized
    def start_game(self, opponent_only: bool = False) -> Game:
        """Start a game with the checked, complete tickets frozen in."""

        if self._state.current_game is not None:
            raise ConflictError("A game is already active")

        tables = () if opponent_only else tuple(
            t for t in self._state.tickets if t.is_checked and t.is_complete
        )
        game = Game(
            id=uuid.uuid4().hex,
            tables=tables,
            is_active=True,
            is_opponent_only_mode=bool(opponent_only),
            tables_played=len(tables),
        )
        self._store.save_game(game)
        self._set(current_game=game, winning_tickets=(), game_opponent_winners=())
        logger.info("Started game %s with %d tickets", game.id, len(tables))
        return game

    def find_winning_tickets(self, drawn_numbers: Iterable[int]) -> list[Ticket]:
        """Tickets of the live game whose seven numbers were all drawn."""

        game = self._state.current_game
        if game is None:
            return []
        drawn = set(drawn_numbers)
        return [t for t in game.tables if isinstance(t, Ticket) and t.contained_in(drawn)]

    def find_serial_winners(self, serial_number: str) -> list[Ticket]:
        game = self._state.current_game
        serial = (serial_number or "").strip()
        if game is None or not serial:
            return []
        return [t for t in game.tables if isinstance(t, Ticket) and t.serial_number == serial]

    def _with_draws(self, game: Game, drawn: tuple[int, ...]) -> Game:
        game = replace(game, drawn_numbers=drawn)
        self._set(current_game=game, winning_tickets=tuple(self.find_winning_tickets(drawn)))
        return game

    @_serialized
    def add_drawn_number(self, number: int) -> Game:
        game = self._active_game()
        number = int(number)
        if number < MIN_NUMBER or number > MAX_NUMBER:
            raise ValidationError(f"Drawn numbers must be within {MIN_NUMBER}..{MAX_NUMBER}")
        if number in game.drawn_numbers:
            raise ConflictError(f"Number {number} was already drawn")
        return self._with_draws(game, game.drawn_numbers + (number,))

    @_serialized
    def remove_drawn_number(self, number: int) -> Game:
        game = self._active_game()
        number = int(number)
        if number not in game.drawn_numbers:
            return game
        return self._with_draws(game, tuple(n for n in game.drawn_numbers if n != number))

    @staticmethod
    def _validated_opponent(data: OpponentWinnerData) -> OpponentWinnerData:
        numbers = tuple(int(n) for n in data.numbers)
        if len(numbers) > TICKET_SIZE:
            raise ValidationError(f"An opponent ticket has at most {TICKET_SIZE} numbers")
        if any(n < MIN_NUMBER or n > MAX_NUMBER for n in numbers):
            raise ValidationError(f"All numbers must be within {MIN_NUMBER}..{MAX_NUMBER}")
        if float(data.winning_amount) < 0:
            raise ValidationError("Winning amount cannot be negative")
        return replace(data, numbers=numbers, serial_number=(data.serial_number or "").strip())

    @_serialized
    def save_opponent_winner(self, data: OpponentWinnerData) -> OpponentWinner:
        """Record a competitor's result against the live game right away."""

        game = self._active_game()
        opponent = self._store.save_opponent_winner(game.id, self._validated_opponent(data))
        self._set(game_opponent_winners=self._state.game_opponent_winners + (opponent,))
        return opponent

    @_serialized
    def finish_game(
        self,
        winners: Sequence[Winner],
        opponent_winners: Sequence[OpponentWinnerData] = (),
    ) -> HistoryEntry:
        """Close the live game: snapshot tickets, store winners and history."""

        game = self._active_game()
        if game.is_opponent_only_mode and any(w.is_player_winner for w in winners):
            raise ValidationError("Opponent-only games have no player winners")
        for winner in winners:
            if float(winner.winning_amount) <= 0:
                raise ValidationError("Winning amounts must be positive")
        opponents = [self._validated_opponent(o) for o in opponent_winners]

        finished = replace(
            game,
            is_active=False,
            finished_at=utcnow(),
            winner_tables=tuple(w.ticket for w in winners if w.is_player_winner),
        )
        total_cost = 0.0 if game.is_opponent_only_mode else len(game.tables) * self._unit_cost
        total_winnings = sum(float(w.winning_amount) for w in winners)

        def _persist() -> HistoryEntry:
            saved_game = self._store.save_game(finished)
            for winner in winners:
                self._store.save_winner(replace(winner, game_id=game.id))
            recorded = list(self._state.game_opponent_winners)
            recorded += [self._store.save_opponent_winner(game.id, o) for o in opponents]
            entry = HistoryEntry(
                id=uuid.uuid4().hex,
                game=saved_game,
                winners=tuple(winners),
                opponent_winners=tuple(recorded),
                total_cost=total_cost,
                total_winnings=total_winnings,
                total_opponent_winnings=sum(o.winning_amount for o in recorded),
                net_profit=total_winnings - total_cost,
                tables_played=game.tables_played or len(game.tables),
            )
            return self._store.save_history_entry(entry)

        with self._store.batch("finish_game"):
            entry = _persist()

        self._set(current_game=None, winning_tickets=(), game_opponent_winners=())
        self.load_data()
        logger.info("Finished game %s: cost %.2f, winnings %.2f", game.id, total_cost, total_winnings)
        return entry

    @_serialized
    def settle_game(
        self,
        main_amount: float = 0.0,
        secondary_amount: float = 0.0,
        secondary_serial: str | None = None,
        opponent_winners: Sequence[OpponentWinnerData] = (),
    ) -> HistoryEntry:
        """Build player winners from the announced prizes and finish the game.

        The main prize is split evenly across tickets whose numbers were all
        drawn; the secondary prize across tickets holding `secondary_serial`.
        """

        game = self._active_game()
        if main_amount < 0 or secondary_amount < 0:
            raise ValidationError("Winning amounts cannot be negative")
        if game.is_opponent_only_mode and (main_amount > 0 or secondary_amount > 0):
            raise ValidationError("Opponent-only games have no player winners")

        winners: list[Winner] = []
        if main_amount > 0:
            main_winners = self.find_winning_tickets(game.drawn_numbers)
            if not main_winners:
                raise ValidationError("No winning tickets detected")
            winners += self._split(game, main_winners, main_amount, GameType.MAIN)
        if secondary_amount > 0:
            serial_winners = self.find_serial_winners(secondary_serial or "")
            if not serial_winners:
                raise ValidationError("No ticket holds the winning serial number")
            winners += self._split(game, serial_winners, secondary_amount, GameType.SECONDARY)

        return self.finish_game(winners, opponent_winners)

    @staticmethod
    def _split(game: Game, tickets: Sequence[Ticket], amount: float, game_type: GameType) -> list[Winner]:
        share = float(amount) / len(tickets)
        return [
            Winner(
                id=uuid.uuid4().hex,
                game_id=game.id,
                ticket=ticket,
                winning_amount=share,
                game_type=game_type,
                is_player_winner=True,
            )
            for ticket in tickets
        ]

    # -- history and read models -----------------------------------------

    @_serialized
    def clear_game_history(self) -> None:
        self._store.clear_game_history()
        self._set(history=())

    @_serialized
    def delete_history_entry(self, history_id: str) -> None:
        if not self._store.delete_history_entry(history_id):
            raise NotFoundError(message=f"History entry {history_id} not found")
        self.load_data()

    @_serialized
    def statistics(self) -> GameStats:
        return self._statistics.compute(self._store.get_game_history())

    @_serialized
    def balance(self) -> BalanceSummary:
        return self._statistics.balance(self._store.get_game_history())

    @_serialized
    def has_statistical_data(self) -> bool:
        return self._recommendations.has_statistical_data()

    @_serialized
    def recommended_numbers(self, count: int | None = None) -> list[int]:
        return self._recommendations.recommend_numbers(count or self._recommendation_size)

    @_serialized
    def recommendations(self, count: int | None = None) -> list[NumberRecommendation]:
        return self._recommendations.recommend_with_scores(count or self._recommendation_size)


def build_coordinator(store: EntityStore, config: Mapping[str, Any]) -> GameCoordinator:
    return GameCoordinator(
        store,
        unit_cost=float(config.get("TICKET_UNIT_COST", 0.25)),
        max_tickets=int(config.get("MAX_TICKETS", 200)),
        recommendation_size=int(config.get("RECOMMENDATION_SIZE", TICKET_SIZE)),
        bulk_fill_limit=int(config.get("BULK_FILL_LIMIT", 20)),
        early_draw_window=int(config.get("EARLY_DRAW_WINDOW", 25)),
    )


def get_coordinator() -> GameCoordinator:
    """Coordinator registered on the current Flask app."""

    coordinator: GameCoordinator | None = current_app.extensions.get("coordinator")
    if coordinator is None:
        raise RuntimeError("Game coordinator not initialized")
    return coordinator
