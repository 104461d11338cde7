from __future__ import annotations

import pytest

from super3 import create_app
from super3.db import create_app_engine, create_session_factory
from super3.entities import TICKET_SIZE
from super3.migrations import initialize_schema, missing_optional_columns
from super3.services.game_coordinator import GameCoordinator
from super3.services.store import EntityStore


@pytest.fixture()
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'super3-test.db'}"


@pytest.fixture()
def engine(database_url):
    engine = create_app_engine(database_url)
    initialize_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine):
    return EntityStore(create_session_factory(engine), missing_optional_columns(engine))


@pytest.fixture()
def coordinator(store):
    coordinator = GameCoordinator(store)
    coordinator.load_data()
    return coordinator


@pytest.fixture()
def app(database_url):
    app = create_app({"DATABASE_URL": database_url, "TESTING": True})
    yield app
    app.extensions["engine"].dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_ticket(coordinator):
    """Create a complete, checked ticket through the coordinator."""

    def _make(numbers, serial, checked=True):
        assert len(numbers) == TICKET_SIZE
        ticket = coordinator.create_ticket()
        return coordinator.update_ticket(
            ticket.id,
            {"numbers": list(numbers), "serial_number": serial, "is_checked": checked},
        )

    return _make
