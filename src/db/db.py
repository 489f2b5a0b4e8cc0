from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from db.models import Base
from domain.aggregate import SumRat


def register_rational_functions(engine: Engine) -> None:
    """Install ``sum_rat`` on every DBAPI connection the engine opens."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        if isinstance(dbapi_connection, sqlite3.Connection):
            dbapi_connection.create_aggregate(SumRat.name, SumRat.num_params, SumRat)


def create_db_engine(db_file: str | Path = "sharebill.db", *, echo: bool = False, **kwargs: Any) -> Engine:
    url = "sqlite:///:memory:" if str(db_file) == ":memory:" else f"sqlite:///{Path(db_file)}"
    engine: Engine = create_engine(url, echo=echo, **kwargs)
    register_rational_functions(engine)
    return engine


def init_db(echo: bool = False, *, db_file: str | Path = "sharebill.db") -> Session:
    engine = create_db_engine(db_file, echo=echo)

    Base.metadata.create_all(engine)
    return sessionmaker(engine)()
