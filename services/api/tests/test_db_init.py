from pathlib import Path

from sqlalchemy import inspect


def test_init_db_creates_tables(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "kebap_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("KEBAP_DB_AUTO_CREATE", "true")

    from services.api.app.db.database import get_engine
    from services.api.app.db.init_db import init_db

    init_db()

    inspector = inspect(get_engine())
    tables = set(inspector.get_table_names())

    assert {"products", "menus", "orders", "order_sessions", "event_log"} <= tables


def test_init_db_can_be_disabled(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "kebap_noop.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("KEBAP_DB_AUTO_CREATE", "false")

    from services.api.app.db.database import get_engine
    from services.api.app.db.init_db import init_db

    init_db()

    assert inspect(get_engine()).get_table_names() == []


def test_init_db_creates_missing_sqlite_directory(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "nested" / "data" / "kebap.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("KEBAP_DB_AUTO_CREATE", "yes")

    from services.api.app.db.init_db import init_db

    init_db()

    assert db_path.exists()
