"""Interactive ``sqlite3`` subprocess for multi-process locking tests.

Two connections inside one Python process do not lock the way two processes
do, so tests that need real cross-process contention drive the ``sqlite3``
command-line shell instead:

    with Sqlite3Process(db_path) as holder, Sqlite3Process(db_path) as writer:
        holder.execute("BEGIN IMMEDIATE;")
        out = writer.execute("INSERT INTO t (v) VALUES ('x');")
        assert "database is locked" in out
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Iterable
from pathlib import Path

from sqlite_testkit.errors import LaunchError, ShellError
from sqlite_testkit.logging import logger
from sqlite_testkit.settings import SETTINGS


MARKER = "MARKER_END"
MARKER_SQL = f"SELECT '{MARKER}';"


def should_log_exit(returncode: int | None, leftover_output: str) -> bool:
    # Only a failing exit that also said something is worth an error log.
    return returncode != 0 and bool(leftover_output.strip())


class Sqlite3Process:
    """A running ``sqlite3 <db_path>`` with line-oriented stdin/stdout.

    stderr is merged into stdout, so engine errors (``database is locked``,
    syntax errors, ...) come back as part of :meth:`execute`'s output. Use it as
    a context manager, or call :meth:`close`, so the child is always reaped.
    """

    def __init__(
        self,
        db_path: str | os.PathLike[str],
        *,
        binary: str | None = None,
        exit_timeout: float | None = None,
    ) -> None:
        self.db_path = Path(db_path)
        self.binary = binary or SETTINGS.sqlite3_binary
        self.exit_timeout = SETTINGS.shell_exit_timeout if exit_timeout is None else exit_timeout
        self._returncode: int | None = None
        try:
            self._proc: subprocess.Popen[str] | None = subprocess.Popen(
                [self.binary, str(self.db_path)],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as exc:
            raise LaunchError(f"failed to spawn {self.binary!r} for {self.db_path}: {exc}") from exc
        logger.debug("sqlite3_spawned", binary=self.binary, db_path=str(self.db_path), pid=self._proc.pid)

    def __enter__(self) -> Sqlite3Process:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Sqlite3Process(db_path={str(self.db_path)!r}, pid={self.pid}, running={self.running})"

    @property
    def pid(self) -> int | None:
        return self._proc.pid if self._proc is not None else None

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode if self._proc is not None else self._returncode

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def _live(self) -> subprocess.Popen[str]:
        if self._proc is None:
            raise ShellError(f"sqlite3 process for {self.db_path} is closed")
        return self._proc

    def execute(self, sql: str) -> str:
        """Send ``sql`` and return everything the shell printed for it.

        A missing trailing ``;`` is added to SQL statements (not dot-commands);
        otherwise the shell would join the statement with the end marker.
        """
        proc = self._live()
        assert proc.stdin is not None and proc.stdout is not None

        statement = sql.rstrip()
        if not statement.startswith(".") and not statement.endswith(";"):
            statement += ";"
        try:
            proc.stdin.write(f"{statement}\n{MARKER_SQL}\n")
            proc.stdin.flush()
        except OSError as exc:
            raise ShellError(f"failed to write to sqlite3 for {self.db_path}: {exc}") from exc

        lines: list[str] = []
        while True:
            line = proc.stdout.readline()
            if not line:
                raise ShellError(
                    f"sqlite3 for {self.db_path} closed its output before the end marker; got {''.join(lines)!r}"
                )
            # Only the marker's own result line ends the output; error text may quote the marker statement.
            if line.strip() == MARKER:
                break
            lines.append(line)
        return "".join(lines)

    def run_script(self, statements: Iterable[str]) -> list[str]:
        return [self.execute(statement) for statement in statements]

    def enable_wal_mode(self) -> None:
        self.execute("PRAGMA journal_mode=WAL;")

    def disable_wal_checkpointing(self) -> None:
        self.execute("PRAGMA wal_autocheckpoint=0;")

    def create_dummy_data(self, row_count: int = 999) -> None:
        """Create table ``test(id, value)`` holding ``'Hello, World! <n>'`` for n in 1..row_count."""
        self.execute("CREATE TABLE test (id INTEGER PRIMARY KEY, value TEXT);")
        if row_count > 0:
            self.execute(
                f"WITH RECURSIVE n(i) AS (SELECT 1 UNION ALL SELECT i + 1 FROM n WHERE i < {int(row_count)}) "
                "INSERT INTO test (value) SELECT 'Hello, World! ' || i FROM n;"
            )

    def _drain(self, proc: subprocess.Popen[str]) -> str:
        try:
            out, _ = proc.communicate(".exit\n", timeout=self.exit_timeout)
        except BrokenPipeError:
            # The child stopped reading stdin; collect what it printed before it went.
            out, _ = proc.communicate(timeout=self.exit_timeout)
        return out or ""

    def terminate(self) -> None:
        """Kill the process without asking it to exit."""
        if self._proc is None:
            return
        proc, self._proc = self._proc, None
        proc.kill()
        proc.communicate()
        self._returncode = proc.returncode
        logger.debug("sqlite3_killed", db_path=str(self.db_path), returncode=proc.returncode)

    def close(self) -> None:
        """Send ``.exit`` and wait for the process; kill it if it hangs.

        Unread output is drained while waiting, so a child blocked on a full
        stdout pipe still exits.
        """
        if self._proc is None:
            return
        proc, self._proc = self._proc, None
        try:
            leftover = self._drain(proc)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
            self._returncode = proc.returncode
            logger.error("sqlite3_hung", db_path=str(self.db_path), timeout=self.exit_timeout)
            raise ShellError(f"sqlite3 process hung for {self.db_path}") from None

        self._returncode = proc.returncode
        if should_log_exit(proc.returncode, leftover):
            logger.error("sqlite3_exit_error", db_path=str(self.db_path), returncode=proc.returncode, output=leftover)
        else:
            logger.debug("sqlite3_exited", db_path=str(self.db_path), returncode=proc.returncode)
