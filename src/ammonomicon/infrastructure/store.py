"""CatalogStore: repository over the catalog's relational backing store.

The store is the single dependency injected into every service. It owns
the database engine and exposes exactly what the wiki core needs:

- :meth:`CatalogStore.fetch_all`: every row of one store location, as
  plain dicts, with no filtering. The index builder calls it once per
  category, concurrently.
- :meth:`CatalogStore.transaction`: a native SQLAlchemy transaction for
  the mutation flows (create/update/delete an entry, save a page).

Tables declared in :mod:`schema` are used directly; any other location
named by configuration is reflected from the database on first use.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import MetaData, Table, delete, insert, select, update
from sqlalchemy.exc import NoSuchTableError

from ammonomicon.infrastructure.database.engine import init_database
from ammonomicon.infrastructure.database.schema import ID_PREFIXES, metadata

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a store location cannot be addressed."""


def generate_entry_id(location: str) -> str:
    """Return a new ``{prefix}_{8 hex}`` id for a row in *location*."""
    prefix = ID_PREFIXES.get(location, location[:3] or "ent")
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


# ---------------------------------------------------------------------------
# StoreTransaction: yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class StoreTransaction:
    """Active transaction context for row mutations."""

    conn: Connection
    _store: CatalogStore

    def get_row(self, location: str, key: Any) -> dict[str, Any] | None:
        """Fetch one row by primary key, or None."""
        table = self._store.table(location)
        pk = _primary_key(table)
        row = self.conn.execute(select(table).where(pk == key)).first()
        return dict(row._mapping) if row is not None else None

    def insert_row(self, location: str, values: dict[str, Any]) -> dict[str, Any]:
        """Insert *values* into *location*, generating ``id`` when absent."""
        table = self._store.table(location)
        pk = _primary_key(table)
        row = dict(values)
        if pk.name == "id" and not row.get("id"):
            row["id"] = generate_entry_id(location)
        self.conn.execute(insert(table).values(**row))
        return row

    def update_row(self, location: str, key: Any, values: dict[str, Any]) -> int:
        """Update the row with primary key *key*. Returns affected row count."""
        table = self._store.table(location)
        pk = _primary_key(table)
        result = self.conn.execute(update(table).where(pk == key).values(**values))
        return result.rowcount

    def delete_row(self, location: str, key: Any) -> int:
        """Delete the row with primary key *key*. Returns affected row count."""
        table = self._store.table(location)
        pk = _primary_key(table)
        result = self.conn.execute(delete(table).where(pk == key))
        return result.rowcount


def _primary_key(table: Table) -> Any:
    columns = list(table.primary_key.columns)
    if len(columns) != 1:
        msg = f"Table '{table.name}' must have a single-column primary key"
        raise StoreError(msg)
    return columns[0]


# ---------------------------------------------------------------------------
# CatalogStore: the repository
# ---------------------------------------------------------------------------


class CatalogStore:
    """Repository encapsulating access to the catalog database.

    Constructed once at CLI startup from the resolved database path and
    stored in the CLI context. Services receive the store via their
    :class:`BaseService` constructor.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._engine: Engine = init_database(db_path)
        self._reflected = MetaData()
        self._reflect_lock = threading.Lock()

    @property
    def db_path(self) -> Path:
        """Location of the SQLite database file."""
        return self._db_path

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    def table(self, location: str) -> Table:
        """Resolve a store location to a table, reflecting unknown ones.

        Raises:
            StoreError: If *location* does not exist in the database.
        """
        known = metadata.tables.get(location)
        if known is not None:
            return known
        with self._reflect_lock:
            cached = self._reflected.tables.get(location)
            if cached is not None:
                return cached
            try:
                return Table(location, self._reflected, autoload_with=self._engine)
            except NoSuchTableError as exc:
                msg = f"Unknown store location '{location}'"
                raise StoreError(msg) from exc

    def fetch_all(self, location: str) -> list[dict[str, Any]]:
        """Return every row of *location* as a dict.

        Rows are ordered by ``name`` (then primary key) when the table has a
        ``name`` column, matching the catalog listings. No filtering and no
        pagination: catalog sizes are tens to low hundreds of rows.
        """
        table = self.table(location)
        stmt = select(table)
        if "name" in table.c:
            stmt = stmt.order_by(table.c.name)
        stmt = stmt.order_by(*table.primary_key.columns)
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        logger.debug("Fetched %d rows from %s", len(rows), location)
        return [dict(row._mapping) for row in rows]

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Native SQLAlchemy transaction: commit on success, rollback on error.

        Usage::

            with store.transaction() as txn:
                txn.insert_row("guns", {"name": "Shotgun"})
        """
        with self._engine.begin() as conn:
            yield StoreTransaction(conn=conn, _store=self)

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()
