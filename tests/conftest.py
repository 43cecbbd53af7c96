from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
import sqlalchemy as sa


# Settings are read at import time; a hung sqlite3 child should fail a test quickly.
os.environ.setdefault("SQLITE_TESTKIT_SHELL_EXIT_TIMEOUT", "10")
os.environ.setdefault("SQLITE_TESTKIT_DEFAULT_SEED", "42")

# Ensure the repo root is importable without an install (so `import sqlite_testkit` works in tests).
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from sqlite_testkit.db import create_engine  # noqa: E402


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture()
def conn(db_path: Path) -> Iterator[sa.Connection]:
    engine = create_engine(db_path, busy_timeout=0.2)
    with engine.connect() as connection:
        yield connection
    engine.dispose()


@pytest.fixture()
def memory_conn() -> Iterator[sa.Connection]:
    engine = create_engine()
    with engine.connect() as connection:
        yield connection
    engine.dispose()
