from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class TestkitSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SQLITE_TESTKIT_", extra="forbid")

    sqlite3_binary: str = "sqlite3"
    # Seconds to wait for `.exit` before the sqlite3 child is killed.
    shell_exit_timeout: float = 60.0

    default_seed: int = 42
    default_table: str = "notes"
    log_level: str = "info"


SETTINGS = TestkitSettings()
