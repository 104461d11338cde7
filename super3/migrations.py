"""Schema creation and versioned, idempotent migrations.

`initialize_schema()` creates every table that is missing, then applies the
migrations in `MIGRATIONS` that are not yet recorded in `schema_version`.
Each step checks the live schema before altering it, so re-running a step
against an already migrated table is a no-op. A failing step is logged and
skipped; later steps still run and the failed one is retried on the next
start-up.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import NamedTuple

from sqlalchemy import inspect, select, text
from sqlalchemy.engine import Connection, Engine

from super3 import models  # noqa: F401  (registers tables on Base.metadata)
from super3.entities import SNAPSHOT_PREFIX
from super3.models.base import Base
from super3.models.schema_version import SchemaVersion

logger = logging.getLogger(__name__)


class Migration(NamedTuple):
    version: int
    description: str
    apply: Callable[[Connection], None]


# Columns added by migrations. Reads defer whichever of these is missing.
OPTIONAL_COLUMNS: dict[str, tuple[str, ...]] = {
    "games": ("is_opponent_only_mode", "winner_ticket_ids", "tables_played"),
    "history": ("total_opponent_winnings",),
    "winners": ("custom_id", "serial_number", "numbers"),
}


def column_names(bind: Engine | Connection, table: str) -> set[str]:
    """Names of the columns `table` currently has (empty if the table is absent)."""

    inspector = inspect(bind)
    if not inspector.has_table(table):
        return set()
    return {str(c["name"]) for c in inspector.get_columns(table)}


def _add_column(conn: Connection, table: str, column: str, ddl_type: str) -> bool:
    existing = column_names(conn, table)
    if not existing:
        logger.info("Table %s does not exist yet, skipping column %s", table, column)
        return False
    if column in existing:
        return False

    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))
    logger.info("Added column %s.%s", table, column)
    return True


def _add_opponent_only_mode(conn: Connection) -> None:
    _add_column(conn, "games", "is_opponent_only_mode", "BOOLEAN NOT NULL DEFAULT FALSE")


def _add_game_foreign_keys(conn: Connection) -> None:
    for table in ("winning_numbers", "winning_serials", "opponent_winners", "winners", "history"):
        _add_column(conn, table, "game_id", "VARCHAR(64)")


def _add_history_opponent_winnings(conn: Connection) -> None:
    _add_column(conn, "history", "total_opponent_winnings", "FLOAT NOT NULL DEFAULT 0")


def _add_winner_ticket_fields(conn: Connection) -> None:
    _add_column(conn, "winners", "custom_id", "VARCHAR(64)")
    _add_column(conn, "winners", "serial_number", "VARCHAR(64)")
    _add_column(conn, "winners", "numbers", "TEXT")


def _add_game_winner_tables(conn: Connection) -> None:
    _add_column(conn, "games", "winner_ticket_ids", "TEXT")
    _add_column(conn, "games", "tables_played", "INTEGER NOT NULL DEFAULT 0")


def _add_ticket_snapshot_columns(conn: Connection) -> None:
    _add_column(conn, "tickets", "kind", "VARCHAR(16) NOT NULL DEFAULT 'live'")
    _add_column(conn, "tickets", "game_id", "VARCHAR(64)")
    _add_column(conn, "tickets", "original_ticket_id", "VARCHAR(64)")

    # Older databases only marked snapshots through the id convention.
    rows = conn.execute(
        text("SELECT id FROM tickets WHERE id LIKE :prefix AND kind <> 'snapshot'"),
        {"prefix": f"{SNAPSHOT_PREFIX}%"},
    ).all()
    for (ticket_id,) in rows:
        game_id, _, original_id = str(ticket_id)[len(SNAPSHOT_PREFIX):].partition("_")
        conn.execute(
            text(
                "UPDATE tickets SET kind = 'snapshot', game_id = :game_id, "
                "original_ticket_id = :original_id WHERE id = :id"
            ),
            {"game_id": game_id or None, "original_id": original_id or None, "id": ticket_id},
        )
    if rows:
        logger.info("Marked %d legacy ticket rows as snapshots", len(rows))


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "opponent-only mode flag on games", _add_opponent_only_mode),
    Migration(2, "game_id on dependent tables", _add_game_foreign_keys),
    Migration(3, "opponent winnings on history", _add_history_opponent_winnings),
    Migration(4, "ticket fields on winners", _add_winner_ticket_fields),
    Migration(5, "winner tables and tables played on games", _add_game_winner_tables),
    Migration(6, "snapshot discriminator on tickets", _add_ticket_snapshot_columns),
)

LATEST_VERSION = MIGRATIONS[-1].version


def applied_versions(engine: Engine) -> set[int]:
    if not column_names(engine, SchemaVersion.__tablename__):
        return set()
    with engine.connect() as conn:
        return {int(v) for v in conn.scalars(select(SchemaVersion.version)).all()}


def current_schema_version(engine: Engine) -> int:
    """Highest recorded migration version, 0 for an unversioned database."""

    return max(applied_versions(engine), default=0)


def initialize_schema(engine: Engine) -> int:
    """Create missing tables and apply pending migrations.

    Returns:
        The schema version after this run.
    """

    Base.metadata.create_all(bind=engine)

    applied = applied_versions(engine)
    for migration in MIGRATIONS:
        if migration.version in applied:
            continue
        try:
            with engine.begin() as conn:
                migration.apply(conn)
                conn.execute(SchemaVersion.__table__.insert().values(version=migration.version))
        except Exception:
            logger.exception(
                "Migration %d (%s) failed, skipping", migration.version, migration.description
            )
            continue
        logger.info("Applied migration %d: %s", migration.version, migration.description)

    return current_schema_version(engine)


def missing_optional_columns(engine: Engine) -> dict[str, set[str]]:
    """Migrated columns absent from the live schema, keyed by table."""

    missing: dict[str, set[str]] = {}
    for table, columns in OPTIONAL_COLUMNS.items():
        existing = column_names(engine, table)
        absent = {c for c in columns if c not in existing}
        if absent:
            missing[table] = absent
    return missing
