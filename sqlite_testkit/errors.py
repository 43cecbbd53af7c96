"""Exceptions raised by sqlite_testkit.

Every error carries the table, row id, schema or journal mode it concerns in its
message so a failing test explains itself.
"""

from __future__ import annotations


class SqliteTestkitError(Exception):
    """Base class for all library errors."""


class InvalidArgument(SqliteTestkitError, ValueError):
    """A size, id, seed or mode argument was rejected before touching the database."""


class SchemaError(SqliteTestkitError):
    """An existing table does not have the (id, payload) shape."""


class NotFound(SqliteTestkitError, LookupError):
    def __init__(self, table: str, row_id: int | None = None) -> None:
        self.table = table
        self.row_id = row_id
        if row_id is None:
            super().__init__(f"table {table!r} does not exist")
        else:
            super().__init__(f"no row with id={row_id} in table {table!r}")


class StorageError(SqliteTestkitError):
    """The engine failed to execute a statement (I/O, locking, corruption, ...)."""


class ShellError(SqliteTestkitError):
    """Talking to the interactive sqlite3 process failed."""


class LaunchError(ShellError):
    """The sqlite3 executable could not be started."""
