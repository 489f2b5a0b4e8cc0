from __future__ import annotations

import logging
from functools import cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DB_FILE = PROJECT_ROOT / "sharebill.db"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class AppSettings(BaseSettings):
    db_file: Path = DB_FILE
    echo_sql: bool = False
    log_level: str = "INFO"
    tx_id_attempts: int = 16
    overview_limit: int = 10
    couchdb_url: str | None = None
    couchdb_database: str = "sharebill"

    model_config = SettingsConfigDict(
        env_prefix="SHAREBILL_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@cache
def config() -> AppSettings:
    return AppSettings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or config().log_level).upper(), format=LOG_FORMAT)
