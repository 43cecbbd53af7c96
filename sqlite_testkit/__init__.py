"""
SQLite test utilities.

Helpers for tests that exercise SQLite locking and journal modes:
- Deterministic seeded rows for a test table
- Create/insert/update/read on that table through SQLAlchemy
- Journal mode switching (WAL, DELETE, ...)
- An interactive `sqlite3` subprocess for multi-process locking scenarios
"""

from __future__ import annotations

from sqlite_testkit.crud import count_rows, init_test_db, insert_row, notes_table, read_row, update_row
from sqlite_testkit.db import create_engine
from sqlite_testkit.errors import (
    InvalidArgument,
    LaunchError,
    NotFound,
    SchemaError,
    ShellError,
    SqliteTestkitError,
    StorageError,
)
from sqlite_testkit.generator import Row, RowGenerator, generate_rows
from sqlite_testkit.journal import JournalMode, get_journal_mode, set_journal_mode
from sqlite_testkit.shell import Sqlite3Process

__all__ = [
    "InvalidArgument",
    "JournalMode",
    "LaunchError",
    "NotFound",
    "Row",
    "RowGenerator",
    "SchemaError",
    "ShellError",
    "Sqlite3Process",
    "SqliteTestkitError",
    "StorageError",
    "count_rows",
    "create_engine",
    "generate_rows",
    "get_journal_mode",
    "init_test_db",
    "insert_row",
    "notes_table",
    "read_row",
    "set_journal_mode",
    "update_row",
]
