"""Entity store: the single owner of durable state.

Every public method runs in its own transaction and is durable when it
returns. Inside `batch()` all calls share one transaction that commits when
the block exits cleanly and rolls back otherwise.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from super3.entities import (
    Game,
    HistoryEntry,
    NumberFrequency,
    OpponentWinner,
    OpponentWinnerData,
    Ticket,
    TicketSnapshot,
    Winner,
    utcnow,
)
from super3.errors import PersistenceError
from super3.models.game import GameRow
from super3.repositories._mapping import aware
from super3.repositories.game_repository import GameRepository
from super3.repositories.history_repository import HistoryRepository
from super3.repositories.lookup_repository import LookupRepository
from super3.repositories.ticket_repository import TicketRepository
from super3.repositories.winner_repository import WinnerRepository

logger = logging.getLogger(__name__)


class EntityStore:
    """CRUD persistence for tickets, games, winners and history."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        missing_columns: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self._session_factory = session_factory
        # Open batch session, per thread; other threads keep their own transactions.
        self._local = threading.local()

        self._tickets = TicketRepository()
        self._games = GameRepository(missing_columns)
        self._lookups = LookupRepository()
        self._winners = WinnerRepository(self._lookups, missing_columns)
        self._history = HistoryRepository(missing_columns)

    # -- transactions -----------------------------------------------------

    @property
    def _batch_session(self) -> Session | None:
        return getattr(self._local, "session", None)

    @_batch_session.setter
    def _batch_session(self, session: Session | None) -> None:
        self._local.session = session

    @contextmanager
    def _unit(self, operation: str) -> Iterator[Session]:
        batch_session = self._batch_session
        if batch_session is not None:
            yield batch_session
            batch_session.flush()
            return

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("%s failed", operation)
            raise PersistenceError(f"{operation} failed") from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def batch(self, operation: str = "batch") -> Iterator[EntityStore]:
        """Run several store calls as one atomic transaction.

        Nested batches join the outer one. The batch belongs to the calling
        thread; calls from other threads run in their own transactions.
        """

        if self._batch_session is not None:
            yield self
            return

        session = self._session_factory()
        self._batch_session = session
        try:
            yield self
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("%s failed", operation)
            raise PersistenceError(f"{operation} failed") from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            self._batch_session = None
            session.close()

    # -- tickets ----------------------------------------------------------

    def save_ticket(self, ticket: Ticket) -> Ticket:
        """Upsert by id. Serial uniqueness is the caller's concern."""

        with self._unit("save_ticket") as session:
            return self._tickets.save_live(session, ticket)

    def get_tickets(self) -> list[Ticket]:
        with self._unit("get_tickets") as session:
            return self._tickets.list_live(session)

    def get_ticket(self, ticket_id: str) -> Ticket | None:
        with self._unit("get_ticket") as session:
            return self._tickets.get_live(session, ticket_id)

    def delete_ticket(self, ticket_id: str) -> bool:
        """Hard delete a live ticket. Snapshots of it are left untouched."""

        with self._unit("delete_ticket") as session:
            return self._tickets.delete_live(session, ticket_id) > 0

    def clear_all_tickets(self) -> int:
        with self._unit("clear_all_tickets") as session:
            return self._tickets.delete_all_live(session)

    def get_ticket_snapshots(self, game_id: str) -> list[TicketSnapshot]:
        with self._unit("get_ticket_snapshots") as session:
            return self._tickets.list_snapshots(session, game_id)

    # -- games ------------------------------------------------------------

    def save_game(self, game: Game) -> Game:
        """Upsert a game and link its tickets.

        A finished game gets a snapshot of every ticket and links to the
        snapshots; an active game links to the live ticket ids.

        Returns:
            The game with `tables` replaced by the linked tickets.
        """

        with self._unit("save_game") as session:
            self._games.save(session, game)

            linked: list[Ticket | TicketSnapshot] = []
            for ticket in game.tables:
                if game.is_finished:
                    if isinstance(ticket, Ticket):
                        ticket = ticket.freeze(game.id)
                    linked.append(self._tickets.save_snapshot(session, ticket))
                else:
                    linked.append(ticket)
            self._games.replace_ticket_links(session, game.id, (t.id for t in linked))

        if not game.is_finished:
            return game
        frozen = {t.original_ticket_id: t for t in linked if isinstance(t, TicketSnapshot)}
        winner_tables = tuple(
            frozen.get(t.id, t) if isinstance(t, Ticket) else t for t in game.winner_tables
        )
        return Game(
            id=game.id,
            tables=tuple(linked),
            drawn_numbers=game.drawn_numbers,
            winner_tables=winner_tables,
            game_type=game.game_type,
            is_active=game.is_active,
            is_opponent_only_mode=game.is_opponent_only_mode,
            started_at=game.started_at,
            finished_at=game.finished_at,
            tables_played=game.tables_played,
        )

    def has_statistical_data(self) -> bool:
        """True once at least one game has finished."""

        with self._unit("has_statistical_data") as session:
            return self._games.count_finished(session) > 0

    def finished_draw_sequences(self) -> list[list[int]]:
        with self._unit("finished_draw_sequences") as session:
            return self._games.finished_draw_sequences(session)

    # -- winners ----------------------------------------------------------

    def save_winner(self, winner: Winner) -> Winner:
        """Persist a winner and fan its numbers and serial into the lookups.

        Must be called after `save_game` has snapshotted the finished game.
        """

        with self._unit("save_winner") as session:
            self._winners.save_winner(session, winner)
        return winner

    def save_opponent_winner(self, game_id: str, data: OpponentWinnerData) -> OpponentWinner:
        opponent = OpponentWinner(
            id=uuid.uuid4().hex,
            game_id=game_id,
            game_type=data.game_type,
            numbers=tuple(int(n) for n in data.numbers),
            serial_number=(data.serial_number or "").strip(),
            winning_amount=float(data.winning_amount),
            notes=data.notes or "",
            created_at=utcnow(),
        )
        with self._unit("save_opponent_winner") as session:
            self._winners.save_opponent_winner(session, opponent)
        return opponent

    def winning_number_frequencies(self, limit: int | None = None) -> list[NumberFrequency]:
        with self._unit("winning_number_frequencies") as session:
            return self._lookups.winning_number_frequencies(session, limit)

    def winning_serials(self) -> dict[str, list[str]]:
        with self._unit("winning_serials") as session:
            return self._lookups.winning_serials(session)

    # -- history ----------------------------------------------------------

    def save_history_entry(self, entry: HistoryEntry) -> HistoryEntry:
        """Persist the summary row; game and winners are rebuilt on read."""

        with self._unit("save_history_entry") as session:
            self._history.save(session, entry)
        return entry

    def get_game_history(self) -> list[HistoryEntry]:
        """Every finished game with its tickets and winners, newest first."""

        with self._unit("get_game_history") as session:
            out: list[HistoryEntry] = []
            for h_row, g_row in self._history.list_with_games(session, self._games.load_options()):
                tables = self._tickets.list_for_game(session, g_row.id)
                winners = self._winners.list_for_game(session, g_row.id)
                opponents = self._winners.list_opponents_for_game(session, g_row.id)

                game = self._games.to_game(
                    g_row,
                    tables=tables,
                    winner_tables=(w.ticket for w in winners if w.is_player_winner),
                )
                out.append(
                    HistoryEntry(
                        id=h_row.id,
                        game=game,
                        winners=tuple(winners),
                        opponent_winners=tuple(opponents),
                        total_cost=float(h_row.total_cost),
                        total_winnings=float(h_row.total_winnings),
                        total_opponent_winnings=self._history.total_opponent_winnings(h_row),
                        net_profit=float(h_row.net_profit),
                        created_at=aware(h_row.created_at),
                        tables_played=game.tables_played,
                    )
                )
            return out

    def delete_history_entry(self, history_id: str) -> bool:
        """Delete a history entry and everything recorded for its game.

        Snapshot ticket rows are left behind.
        """

        with self._unit("delete_history_entry") as session:
            game_id = self._history.get_game_id(session, history_id)
            if game_id is None:
                return False
            self._winners.delete_for_games(session, [game_id])
            self._history.delete(session, history_id)
            self._games.delete(session, game_id)
            return True

    def clear_game_history(self) -> None:
        with self._unit("clear_game_history") as session:
            finished = select(GameRow.id).where(GameRow.finished_at.is_not(None))
            self._winners.delete_for_games(session, finished)
            self._history.delete_all(session)
            self._games.delete_finished(session)
