from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

import sqlalchemy as sa
from sqlalchemy.pool import NullPool, StaticPool

from sqlite_testkit.errors import StorageError


def create_engine(path: str | os.PathLike[str] | None = None, *, busy_timeout: float | None = None) -> sa.Engine:
    """Engine for a SQLite file, or a private in-memory database when ``path`` is None/":memory:".

    ``busy_timeout`` is how many seconds a statement waits on another connection's lock
    before failing with "database is locked" (the driver default is 5).
    """
    connect_args: dict[str, object] = {}
    if busy_timeout is not None:
        connect_args["timeout"] = busy_timeout
    if path is None or str(path) == ":memory:":
        # One shared DBAPI connection, otherwise every checkout sees an empty database.
        return sa.create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={**connect_args, "check_same_thread": False},
        )
    # Built field by field: "?" and "#" are legal in file names but not in a URL string.
    url = sa.URL.create("sqlite", database=os.fspath(path))
    # NullPool so no connection outlives its `with engine.connect()` block and holds file locks.
    return sa.create_engine(url, poolclass=NullPool, connect_args=connect_args)


@contextmanager
def operation(conn: sa.Connection, action: str, **context: object) -> Iterator[None]:
    """One library call on ``conn``: commit on success, roll back on any error.

    Engine errors are re-raised as StorageError carrying ``action`` and ``context``.
    """
    try:
        yield
        conn.commit()
    except sa.exc.SQLAlchemyError as exc:
        conn.rollback()
        detail = ", ".join(f"{key}={value!r}" for key, value in context.items())
        raise StorageError(f"{action} failed ({detail}): {exc}") from exc
    except Exception:
        conn.rollback()
        raise
