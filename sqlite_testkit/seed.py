from __future__ import annotations

import argparse
import json
from collections.abc import Sequence
from pathlib import Path

from sqlite_testkit.crud import count_rows, init_test_db
from sqlite_testkit.db import create_engine
from sqlite_testkit.journal import get_journal_mode, set_journal_mode
from sqlite_testkit.logging import configure_logging
from sqlite_testkit.settings import SETTINGS


def seed(
    db_path: Path,
    table_name: str,
    seed_value: int,
    row_count: int,
    payload_length: int,
    *,
    journal_mode: str | None = None,
) -> dict[str, object]:
    """Create (or extend) a seeded test database file and return a summary."""
    engine = create_engine(db_path)
    try:
        with engine.connect() as conn:
            # Switch first: WAL cannot be entered while a write transaction is open.
            if journal_mode:
                set_journal_mode(conn, journal_mode)
            init_test_db(conn, table_name, seed_value, row_count, payload_length)
            summary = {
                "db_path": str(db_path),
                "table": table_name,
                "seed": seed_value,
                "rows": count_rows(conn, table_name),
                "journal_mode": get_journal_mode(conn),
            }
    finally:
        engine.dispose()
    return summary


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Build a SQLite database filled with deterministic test rows.")
    parser.add_argument("db_path", type=Path)
    parser.add_argument("--table", default=SETTINGS.default_table)
    parser.add_argument("--seed", type=int, default=SETTINGS.default_seed)
    parser.add_argument("--rows", type=int, default=100)
    parser.add_argument("--payload-length", type=int, default=10)
    parser.add_argument("--journal-mode", default=None, help="e.g. WAL, DELETE, TRUNCATE, PERSIST, MEMORY, OFF")
    parser.add_argument("--log-level", default=SETTINGS.log_level)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    summary = seed(
        args.db_path,
        args.table,
        args.seed,
        args.rows,
        args.payload_length,
        journal_mode=args.journal_mode,
    )
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    main()
