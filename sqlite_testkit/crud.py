from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.schema import CreateTable

from sqlite_testkit.db import operation
from sqlite_testkit.errors import NotFound, SchemaError
from sqlite_testkit.generator import RowGenerator, require_int
from sqlite_testkit.logging import logger
from sqlite_testkit.settings import SETTINGS


def notes_table(table_name: str, *, schema: str | None = None) -> sa.Table:
    return sa.Table(
        table_name,
        sa.MetaData(),
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("payload", sa.Text(), nullable=False),
        schema=schema,
    )


def _qualified(table_name: str, schema: str | None) -> str:
    return f"{schema}.{table_name}" if schema else table_name


def _table_exists(conn: sa.Connection, table_name: str, schema: str | None) -> bool:
    insp = sa.inspect(conn)
    if not insp.has_table(table_name, schema=schema):
        return False
    columns = {c["name"]: c["type"] for c in insp.get_columns(table_name, schema=schema)}
    pk = insp.get_pk_constraint(table_name, schema=schema).get("constrained_columns") or []
    if (
        pk != ["id"]
        or not isinstance(columns.get("id"), sa.Integer)
        or not isinstance(columns.get("payload"), sa.String)
    ):
        raise SchemaError(
            f"table {_qualified(table_name, schema)!r} must be (id INTEGER PRIMARY KEY, payload TEXT); "
            f"found columns {sorted(columns)} with primary key {pk}"
        )
    return True


def _require_table(conn: sa.Connection, table_name: str, schema: str | None) -> None:
    if not _table_exists(conn, table_name, schema):
        raise NotFound(_qualified(table_name, schema))


def _next_id(conn: sa.Connection, table: sa.Table) -> int:
    return conn.execute(sa.select(sa.func.coalesce(sa.func.max(table.c.id), 0) + 1)).scalar_one()


def _count(conn: sa.Connection, table: sa.Table) -> int:
    return conn.execute(sa.select(sa.func.count()).select_from(table)).scalar_one()


def init_test_db(
    conn: sa.Connection,
    table_name: str,
    seed: int,
    row_count: int,
    payload_length: int,
    *,
    schema: str | None = None,
) -> None:
    """Create ``table_name`` if absent and fill it with ``row_count`` seeded rows.

    A fresh table gets ids ``1..row_count``. If a compatible table already
    exists the new ids continue after its current maximum.
    """
    generator = RowGenerator(seed, payload_length)
    row_count = require_int("row_count", row_count, minimum=0)
    table = notes_table(table_name, schema=schema)
    name = _qualified(table_name, schema)

    with operation(conn, "init_test_db", table=name, seed=seed, row_count=row_count):
        if _table_exists(conn, table_name, schema):
            start_id = _next_id(conn, table)
        else:
            conn.execute(CreateTable(table, if_not_exists=True))
            start_id = 1
        rows = [{"id": r.id, "payload": r.payload} for r in generator.rows(row_count, start_id)]
        if rows:
            conn.execute(table.insert(), rows)
        total = _count(conn, table)

    logger.info("test_db_initialized", table=name, seed=seed, inserted=row_count, row_count=total)


def count_rows(conn: sa.Connection, table_name: str, *, schema: str | None = None) -> int:
    table = notes_table(table_name, schema=schema)
    with operation(conn, "count_rows", table=_qualified(table_name, schema)):
        _require_table(conn, table_name, schema)
        return _count(conn, table)


def insert_row(
    conn: sa.Connection,
    table_name: str,
    payload_length: int,
    *,
    seed: int | None = None,
    schema: str | None = None,
) -> int:
    """Append one generated row and return its id (current max id + 1)."""
    generator = RowGenerator(SETTINGS.default_seed if seed is None else seed, payload_length)
    table = notes_table(table_name, schema=schema)
    name = _qualified(table_name, schema)

    with operation(conn, "insert_row", table=name):
        _require_table(conn, table_name, schema)
        row = generator.row(_next_id(conn, table))
        conn.execute(table.insert().values(id=row.id, payload=row.payload))

    logger.debug("row_inserted", table=name, row_id=row.id, payload_length=payload_length)
    return row.id


# Revisions tried when looking for text that differs from what a row already holds.
_MAX_REVISIONS = 64


def _fresh_revision(generator: RowGenerator, row_id: int, current: str) -> int:
    for revision in range(1, _MAX_REVISIONS + 1):
        if generator.payload(row_id, revision) != current:
            return revision
    # Tiny lengths (or 0) can only repeat.
    return 1


def update_row(
    conn: sa.Connection,
    table_name: str,
    row_id: int,
    payload_length: int,
    *,
    seed: int | None = None,
    revision: int | None = None,
    schema: str | None = None,
) -> None:
    """Overwrite the payload of ``row_id`` with freshly generated text.

    By default the lowest revision (>= 1) whose text differs from the stored
    payload is written, so back-to-back updates keep changing the row. Pass
    ``revision`` to write one specific regeneration instead; revision 0 is the
    content the row was created with.
    """
    generator = RowGenerator(SETTINGS.default_seed if seed is None else seed, payload_length)
    row_id = require_int("row_id", row_id)
    if revision is not None:
        revision = require_int("revision", revision, minimum=0)
    table = notes_table(table_name, schema=schema)
    name = _qualified(table_name, schema)

    with operation(conn, "update_row", table=name, row_id=row_id):
        _require_table(conn, table_name, schema)
        if revision is None:
            current = conn.execute(sa.select(table.c.payload).where(table.c.id == row_id)).scalar_one_or_none()
            if current is None:
                raise NotFound(name, row_id)
            revision = _fresh_revision(generator, row_id, current)
        payload = generator.payload(row_id, revision)
        result = conn.execute(table.update().where(table.c.id == row_id).values(payload=payload))
        if result.rowcount == 0:
            raise NotFound(name, row_id)

    logger.debug("row_updated", table=name, row_id=row_id, payload_length=payload_length, revision=revision)


def read_row(conn: sa.Connection, table_name: str, row_id: int, *, schema: str | None = None) -> str:
    table = notes_table(table_name, schema=schema)
    name = _qualified(table_name, schema)

    with operation(conn, "read_row", table=name, row_id=row_id):
        _require_table(conn, table_name, schema)
        row = conn.execute(sa.select(table.c.payload).where(table.c.id == row_id)).first()

    if row is None:
        raise NotFound(name, row_id)
    return row.payload
