"""Helpers shared by the repositories."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import defer
from sqlalchemy.orm.interfaces import LoaderOption


def aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; treat stored datetimes as UTC."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def deferred(model: type, columns: Iterable[str]) -> list[LoaderOption]:
    return [defer(getattr(model, name)) for name in sorted(columns)]


def optional(row: object, name: str, missing: Iterable[str], default: Any) -> Any:
    """Read a migrated column, falling back to `default` when it is absent."""

    if name in missing:
        return default
    value = getattr(row, name)
    return default if value is None else value
