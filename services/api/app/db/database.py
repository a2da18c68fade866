from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None
_SESSIONMAKER: sessionmaker | None = None


def _default_db_url() -> str:
    # Orders, sessions and the SQL catalog share one file when nothing is configured.
    return "sqlite+pysqlite:///.local/kebap.db"


def get_engine() -> Engine:
    """Engine for the current ``DATABASE_URL``; rebuilt when the URL changes."""

    global _ENGINE, _ENGINE_URL, _SESSIONMAKER

    url = os.getenv("DATABASE_URL", _default_db_url())

    if _ENGINE is not None and _ENGINE_URL == url:
        return _ENGINE

    connect_args: dict[str, object] = {}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    _ENGINE = create_engine(url, future=True, connect_args=connect_args)
    _ENGINE_URL = url
    _SESSIONMAKER = sessionmaker(bind=_ENGINE, class_=Session, autocommit=False, autoflush=False)
    return _ENGINE


def db_session() -> Session:
    get_engine()
    assert _SESSIONMAKER is not None
    return _SESSIONMAKER()
