from __future__ import annotations

import shutil
from pathlib import Path

import pytest
import sqlalchemy as sa

from sqlite_testkit.crud import count_rows, init_test_db, insert_row, read_row
from sqlite_testkit.errors import StorageError
from sqlite_testkit.shell import Sqlite3Process


pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("sqlite3") is None, reason="sqlite3 command-line shell not installed"),
]


def _int(output: str) -> int:
    return int(output.strip())


def test_execute_returns_query_output(db_path: Path) -> None:
    with Sqlite3Process(db_path) as proc:
        assert proc.running
        assert proc.execute("SELECT 1 + 1;").strip() == "2"
    assert proc.returncode == 0
    assert not proc.running


def test_run_script_returns_one_output_per_command(db_path: Path) -> None:
    with Sqlite3Process(db_path) as proc:
        outputs = proc.run_script(
            [
                "CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT);",
                "INSERT INTO t (v) VALUES ('a'), ('b');",
                "SELECT v FROM t ORDER BY id;",
            ]
        )
    assert outputs[0] == ""
    assert outputs[1] == ""
    assert outputs[2].split() == ["a", "b"]


def test_execute_without_semicolon_returns(db_path: Path) -> None:
    with Sqlite3Process(db_path, exit_timeout=5) as proc:
        assert proc.execute("SELECT 1").strip() == "1"
        assert proc.execute("SELECT 2 + 2\n").strip() == "4"


def test_errors_are_captured_and_the_shell_keeps_going(db_path: Path) -> None:
    with Sqlite3Process(db_path) as proc:
        out = proc.execute("SELECT * FROM missing_table;")
        assert "no such table" in out
        assert proc.execute("SELECT 3;").strip() == "3"


def test_enable_wal_mode(db_path: Path) -> None:
    with Sqlite3Process(db_path) as proc:
        proc.enable_wal_mode()
        assert "wal" in proc.execute("PRAGMA journal_mode;").lower()


def test_disable_wal_checkpointing(db_path: Path) -> None:
    with Sqlite3Process(db_path) as proc:
        proc.enable_wal_mode()
        before = _int(proc.execute("PRAGMA wal_autocheckpoint;"))
        assert before > 0

        proc.disable_wal_checkpointing()

        assert _int(proc.execute("PRAGMA wal_autocheckpoint;")) == 0


def test_create_dummy_data(db_path: Path) -> None:
    with Sqlite3Process(db_path) as proc:
        proc.create_dummy_data()

        assert _int(proc.execute("SELECT COUNT(*) FROM test;")) == 999
        assert "Hello, World! 1" in proc.execute("SELECT value FROM test WHERE id = 1;")


@pytest.mark.parametrize("journal_mode", ["DELETE", "WAL"])
def test_second_process_sees_the_write_lock(db_path: Path, journal_mode: str) -> None:
    with Sqlite3Process(db_path) as holder, Sqlite3Process(db_path) as writer:
        holder.execute(f"PRAGMA journal_mode={journal_mode};")
        holder.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT);")
        holder.execute("BEGIN IMMEDIATE;")
        holder.execute("INSERT INTO t (v) VALUES ('held');")

        out = writer.execute("INSERT INTO t (v) VALUES ('blocked');").lower()
        assert "locked" in out or "busy" in out

        holder.execute("COMMIT;")
        assert _int(writer.execute("SELECT COUNT(*) FROM t;")) == 1
        assert writer.execute("INSERT INTO t (v) VALUES ('after');") == ""
        assert _int(holder.execute("SELECT COUNT(*) FROM t;")) == 2


def test_shell_sees_rows_written_by_the_library(conn: sa.Connection, db_path: Path) -> None:
    init_test_db(conn, "notes", seed=42, row_count=100, payload_length=10)

    with Sqlite3Process(db_path) as proc:
        assert _int(proc.execute("SELECT COUNT(*) FROM notes;")) == 100
        shown = proc.execute("SELECT payload FROM notes WHERE id = 7;").rstrip("\n")

    assert shown == read_row(conn, "notes", 7)


def test_library_write_fails_while_shell_holds_the_lock(conn: sa.Connection, db_path: Path) -> None:
    init_test_db(conn, "notes", seed=42, row_count=10, payload_length=10)

    with Sqlite3Process(db_path) as holder:
        holder.execute("BEGIN IMMEDIATE;")
        with pytest.raises(StorageError, match="locked"):
            insert_row(conn, "notes", 5)
        assert not conn.in_transaction()
        holder.execute("ROLLBACK;")

    assert insert_row(conn, "notes", 5) == 11
    assert count_rows(conn, "notes") == 11
