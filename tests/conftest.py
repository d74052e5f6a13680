"""Shared pytest fixtures and test helpers for ammonomicon tests."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from ammonomicon.infrastructure.database.engine import init_database
from ammonomicon.infrastructure.store import CatalogStore
from ammonomicon.services.catalog import CatalogService

# ---------------------------------------------------------------------------
# Sample catalog
# ---------------------------------------------------------------------------

SHOTGUN: dict[str, Any] = {
    "id": "gun_shotgun1",
    "name": "Shotgun",
    "quality": "D",
    "magazine_size": 6,
    "description": "Pairs well with :Shotgun Coffee:.",
}
SHOTGUN_COFFEE: dict[str, Any] = {
    "id": "itm_coffee01",
    "name": "Shotgun Coffee",
    "effect": "Faster :Shotgun: reloads. See :Lead Pipe:.",
}
LICH: dict[str, Any] = {
    "id": "bos_lich0001",
    "name": "Lich",
    "name_2": "Phase Two",
    "common_name": "The Lich",
    "is_duo": True,
    "health": "1500",
    "description": "Weak to the :Shotgun:.",
}
OLD_RED: dict[str, Any] = {
    "id": "npc_oldred01",
    "name": "Old Red",
    "description": "Sells :Shotgun Coffee:.",
}

SAMPLE_ROWS: dict[str, list[dict[str, Any]]] = {
    "guns": [SHOTGUN],
    "items": [SHOTGUN_COFFEE],
    "bosses": [LICH],
    "npcs": [OLD_RED],
    "text_pages": [
        {"page_name": "maldicion", "content": "Cursed foes resist the :Shotgun:."},
        {"page_name": "genialidad", "content": "Coolness helps with :Unknown Thing:."},
    ],
}


def insert_rows(store: CatalogStore, rows_by_location: dict[str, list[dict[str, Any]]]) -> None:
    """Insert raw rows into *store*, one transaction."""
    with store.transaction() as txn:
        for location, rows in rows_by_location.items():
            for row in rows:
                txn.insert_row(location, dict(row))


class MemoryStore:
    """In-memory stand-in for :class:`CatalogStore` (``fetch_all`` only).

    Values in *data* may be a list of rows or an exception instance, which
    ``fetch_all`` raises for that location.
    """

    def __init__(
        self,
        data: dict[str, Any] | None = None,
        *,
        hook: Callable[[str], None] | None = None,
    ) -> None:
        self.data: dict[str, Any] = dict(data or {})
        self.calls: list[str] = []
        self._hook = hook
        self._lock = threading.Lock()

    def fetch_all(self, location: str) -> list[dict[str, Any]]:
        with self._lock:
            self.calls.append(location)
        if self._hook is not None:
            self._hook(location)
        value = self.data.get(location, [])
        if isinstance(value, Exception):
            raise value
        return [dict(row) for row in value]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path / "catalog.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store(tmp_path: Path) -> Iterator[CatalogStore]:
    """Empty catalog store on a temp database."""
    s = CatalogStore(tmp_path / "catalog.db")
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def seeded_store(store: CatalogStore) -> CatalogStore:
    """Catalog store holding :data:`SAMPLE_ROWS`."""
    insert_rows(store, SAMPLE_ROWS)
    return store


@pytest.fixture
def catalog(seeded_store: CatalogStore) -> CatalogService:
    """CatalogService over the seeded store with its first snapshot built."""
    svc = CatalogService(seeded_store)
    result = svc.refetch()
    assert result.ok, result.error
    return svc


@pytest.fixture
def wiki_root(tmp_path: Path) -> Path:
    """Temporary wiki directory (no config file: defaults apply)."""
    return tmp_path


@pytest.fixture
def _isolated_wiki(wiki_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp wiki root so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_wiki")`` on command test
    classes.
    """
    monkeypatch.delenv("AMMONOMICON_CONFIG", raising=False)
    monkeypatch.chdir(wiki_root)


@pytest.fixture
def _seeded_wiki(_isolated_wiki: None, wiki_root: Path) -> None:
    """Isolated wiki whose default database holds :data:`SAMPLE_ROWS`."""
    from ammonomicon.infrastructure.database.engine import default_db_path

    s = CatalogStore(default_db_path(wiki_root))
    try:
        insert_rows(s, SAMPLE_ROWS)
    finally:
        s.close()


@pytest.fixture(autouse=True)
def _telemetry_off() -> Iterator[None]:
    """``-v`` invocations enable telemetry for the calling context; undo it."""
    yield
    from ammonomicon.services.telemetry import disable_telemetry

    disable_telemetry()
