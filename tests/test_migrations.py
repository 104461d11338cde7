from __future__ import annotations

from sqlalchemy import text

from super3.db import create_app_engine
from super3.migrations import (
    LATEST_VERSION,
    applied_versions,
    column_names,
    current_schema_version,
    initialize_schema,
    missing_optional_columns,
)

LEGACY_DDL = (
    """
    CREATE TABLE tickets (
        id VARCHAR(120) PRIMARY KEY,
        custom_id VARCHAR(64),
        serial_number VARCHAR(64) NOT NULL DEFAULT '',
        numbers TEXT NOT NULL DEFAULT '[]',
        is_checked BOOLEAN NOT NULL DEFAULT 0,
        is_complete BOOLEAN NOT NULL DEFAULT 0,
        created_at DATETIME NOT NULL
    )
    """,
    """
    CREATE TABLE games (
        id VARCHAR(64) PRIMARY KEY,
        drawn_numbers TEXT NOT NULL DEFAULT '[]',
        game_type VARCHAR(16) NOT NULL DEFAULT 'main',
        is_active BOOLEAN NOT NULL DEFAULT 0,
        started_at DATETIME NOT NULL,
        finished_at DATETIME
    )
    """,
    """
    CREATE TABLE history (
        id VARCHAR(64) PRIMARY KEY,
        total_cost FLOAT NOT NULL,
        total_winnings FLOAT NOT NULL,
        net_profit FLOAT NOT NULL,
        created_at DATETIME NOT NULL
    )
    """,
    """
    CREATE TABLE winners (
        id VARCHAR(64) PRIMARY KEY,
        ticket_id VARCHAR(120),
        winning_amount FLOAT NOT NULL,
        game_type VARCHAR(16) NOT NULL,
        is_player_winner BOOLEAN NOT NULL DEFAULT 1,
        created_at DATETIME NOT NULL
    )
    """,
)


def _legacy_engine(tmp_path):
    engine = create_app_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        for ddl in LEGACY_DDL:
            conn.execute(text(ddl))
        conn.execute(
            text(
                "INSERT INTO tickets (id, serial_number, numbers, created_at) VALUES "
                "('t1', '1', '[]', '2024-01-01 00:00:00'), "
                "('snapshot_g1_t1', '1', '[]', '2024-01-01 00:00:00')"
            )
        )
    return engine


def test_fresh_database_reaches_latest_version(engine):
    assert current_schema_version(engine) == LATEST_VERSION
    assert applied_versions(engine) == set(range(1, LATEST_VERSION + 1))
    assert missing_optional_columns(engine) == {}


def test_initialize_is_idempotent(engine):
    assert initialize_schema(engine) == LATEST_VERSION
    assert initialize_schema(engine) == LATEST_VERSION


def test_legacy_database_is_upgraded(tmp_path):
    engine = _legacy_engine(tmp_path)
    try:
        assert current_schema_version(engine) == 0
        missing = missing_optional_columns(engine)
        assert "tables_played" in missing["games"]
        assert missing["history"] == {"total_opponent_winnings"}

        assert initialize_schema(engine) == LATEST_VERSION

        assert {"is_opponent_only_mode", "winner_ticket_ids", "tables_played"} <= column_names(
            engine, "games"
        )
        assert {"game_id", "total_opponent_winnings"} <= column_names(engine, "history")
        assert {"custom_id", "serial_number", "numbers", "game_id"} <= column_names(engine, "winners")
        assert {"kind", "game_id", "original_ticket_id"} <= column_names(engine, "tickets")
        assert missing_optional_columns(engine) == {}
    finally:
        engine.dispose()


def test_legacy_snapshot_rows_are_marked(tmp_path):
    engine = _legacy_engine(tmp_path)
    try:
        initialize_schema(engine)
        with engine.connect() as conn:
            rows = dict(
                (r.id, (r.kind, r.game_id, r.original_ticket_id))
                for r in conn.execute(text("SELECT id, kind, game_id, original_ticket_id FROM tickets"))
            )
    finally:
        engine.dispose()

    assert rows["t1"] == ("live", None, None)
    assert rows["snapshot_g1_t1"] == ("snapshot", "g1", "t1")


def test_column_names_of_missing_table_is_empty(engine):
    assert column_names(engine, "no_such_table") == set()
