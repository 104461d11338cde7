"""Environment-based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy.engine import URL


def resolve_database_url() -> str:
    """Resolve DB connection string.

    Priority:
      1) DATABASE_URL (explicit)
      2) SUPER3_DB_PATH, a local sqlite file
      3) ./super3.db
    """

    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    path = os.getenv("SUPER3_DB_PATH") or "./super3.db"
    return URL.create(drivername="sqlite", database=path).render_as_string(hide_password=False)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class BaseConfig:
    """Base configuration shared by all environments."""

    APP_ENV: str = os.getenv("APP_ENV", "development")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret")
    DATABASE_URL: str = resolve_database_url()
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Game rules
    TICKET_UNIT_COST: float = _float_env("TICKET_UNIT_COST", 0.25)
    MAX_TICKETS: int = _int_env("MAX_TICKETS", 200)
    RECOMMENDATION_SIZE: int = _int_env("RECOMMENDATION_SIZE", 7)
    BULK_FILL_LIMIT: int = _int_env("BULK_FILL_LIMIT", 20)
    EARLY_DRAW_WINDOW: int = _int_env("EARLY_DRAW_WINDOW", 25)


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    """Production configuration."""

    DEBUG: bool = False


@dataclass(frozen=True)
class TestingConfig(BaseConfig):
    """Test configuration. Callers normally override DATABASE_URL."""

    DEBUG: bool = False
    TESTING: bool = True


def get_config() -> type[BaseConfig]:
    """Resolve configuration class based on APP_ENV."""

    env = os.getenv("APP_ENV", "development").lower().strip()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
