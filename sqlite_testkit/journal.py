from __future__ import annotations

import enum

import sqlalchemy as sa

from sqlite_testkit.db import operation
from sqlite_testkit.errors import InvalidArgument
from sqlite_testkit.logging import logger


class JournalMode(str, enum.Enum):
    DELETE = "DELETE"
    TRUNCATE = "TRUNCATE"
    PERSIST = "PERSIST"
    MEMORY = "MEMORY"
    WAL = "WAL"
    OFF = "OFF"


def _pragma(conn: sa.Connection, schema: str | None) -> str:
    if not schema:
        return "PRAGMA journal_mode"
    return f"PRAGMA {conn.dialect.identifier_preparer.quote(schema)}.journal_mode"


def _normalize(mode: JournalMode | str) -> str:
    value = mode.value if isinstance(mode, JournalMode) else str(mode)
    # The mode is spliced into the pragma text, so only plain identifiers pass.
    if not value.isidentifier():
        raise InvalidArgument(f"journal mode must be a bare identifier, got {value!r}")
    return value.upper()


def set_journal_mode(conn: sa.Connection, mode: JournalMode | str, schema: str | None = "main") -> str:
    """Switch the journal mode of ``schema`` and return the mode SQLite actually applied.

    SQLite may keep a different mode without raising (an in-memory database
    answers MEMORY to a WAL request). That is reported through the return value
    and a warning log, never as an exception; compare against the request.
    """
    requested = _normalize(mode)
    with operation(conn, "set_journal_mode", schema=schema, mode=requested):
        applied = conn.exec_driver_sql(f"{_pragma(conn, schema)} = {requested}").scalar_one()
    applied = str(applied).upper()

    if applied != requested:
        logger.warning("journal_mode_fallback", schema=schema, requested=requested, applied=applied)
    else:
        logger.debug("journal_mode_set", schema=schema, mode=applied)
    return applied


def get_journal_mode(conn: sa.Connection, schema: str | None = "main") -> str:
    with operation(conn, "get_journal_mode", schema=schema):
        mode = conn.exec_driver_sql(_pragma(conn, schema)).scalar_one()
    return str(mode).upper()
