"""Custom column types."""

from __future__ import annotations

import json
import logging

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


def _decode_list(value: str | None) -> list | None:
    """JSON list stored in `value`; None (after a warning) if it is not one."""

    if not value:
        return []
    try:
        decoded = json.loads(value)
    except ValueError:
        decoded = None
    if not isinstance(decoded, list):
        logger.warning("Unreadable list column value %r, reading it as empty", value)
        return None
    return decoded


class IntList(TypeDecorator):
    """List of integers encoded as JSON text in a single column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is None:
            return None
        return json.dumps([int(n) for n in value])

    def process_result_value(self, value, dialect):  # type: ignore[no-untyped-def]
        decoded = _decode_list(value)
        return [int(n) for n in decoded] if decoded else []


class StrList(TypeDecorator):
    """List of strings encoded as JSON text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is None:
            return None
        return json.dumps([str(v) for v in value])

    def process_result_value(self, value, dialect):  # type: ignore[no-untyped-def]
        decoded = _decode_list(value)
        return [str(v) for v in decoded] if decoded else []
