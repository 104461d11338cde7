"""SQLAlchemy engine + session factory.

Sessions are not request scoped: every store operation opens its own
transaction (see `super3.services.store.EntityStore`).
"""

from __future__ import annotations

from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from super3.migrations import initialize_schema


def create_app_engine(database_url: str) -> Engine:
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty db.
            return create_engine(
                database_url,
                connect_args=connect_args,
                poolclass=StaticPool,
                future=True,
            )
        return create_engine(database_url, connect_args=connect_args, future=True)

    return create_engine(database_url, pool_pre_ping=True, future=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(app: Flask) -> None:
    """Create the engine, bring the schema up to date and register both."""

    engine = create_app_engine(str(app.config["DATABASE_URL"]))
    initialize_schema(engine)

    app.extensions["engine"] = engine
    app.extensions["session_factory"] = create_session_factory(engine)
