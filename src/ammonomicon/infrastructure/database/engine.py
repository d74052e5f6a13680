"""Database engine setup for SQLite with WAL mode.

SQLite is the backing store for every catalog category. WAL mode lets the
index builder's concurrent full-table reads proceed while a mutation
commits. The DB is stored at {wiki_root}/.ammonomicon/ammonomicon.db
unless ``[database] path`` overrides it.

SQLAlchemy Core (not ORM) is used: the catalog is read as plain row
dicts, so there is no benefit from session management or identity maps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from ammonomicon.infrastructure.database.schema import metadata

DATA_DIRNAME = ".ammonomicon"
DB_FILENAME = "ammonomicon.db"


def default_db_path(wiki_root: Path) -> Path:
    """Return ``{wiki_root}/.ammonomicon/ammonomicon.db``."""
    return wiki_root / DATA_DIRNAME / DB_FILENAME


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    # Pooled connections are shared by the index builder's fetch threads.
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(db_path: Path) -> Engine:
    """Initialize the catalog database at *db_path*.

    Creates the parent directory and every table from
    :data:`schema.metadata`. Idempotent: safe to call on an existing wiki.

    Returns the engine ready for use.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    return engine
