"""Create tables and apply pending migrations in the configured database.

Reads DATABASE_URL (or SUPER3_DB_PATH) from .env / environment.

Usage:
  python scripts/init_db.py
"""

from __future__ import annotations

import pathlib
import sys

from dotenv import load_dotenv

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from super3.config import resolve_database_url
from super3.db import create_app_engine
from super3.migrations import LATEST_VERSION, initialize_schema


def main() -> int:
    """Bring the schema up to date and report the resulting version."""

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(resolve_database_url())
    version = initialize_schema(engine)

    print(f"Schema version {version} (latest {LATEST_VERSION}).")
    return 0 if version == LATEST_VERSION else 1


if __name__ == "__main__":
    raise SystemExit(main())
