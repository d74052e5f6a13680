"""CatalogService: concurrent fetch and atomic index snapshot swap.

The service owns the one shared, read-mostly view of the catalog: a
:class:`CatalogSnapshot` holding the raw rows per category and the lookup
index built from them. Rendering call sites read :attr:`snapshot` once and
work from that reference; they never observe a half-built index.

Rebuild protocol (:meth:`CatalogService.refetch`):

1. Claim a generation number (monotonic, taken when the rebuild starts).
2. Fetch every category concurrently through a ``ThreadPoolExecutor``
   and join on all of them. A failed fetch contributes zero rows and is
   reported, never raised.
3. Build the index in one pass (:func:`build_lookup`).
4. Install the snapshot only if no rebuild that started later has already
   installed one (last-started wins). The swap is a single attribute
   assignment under a lock.

INVARIANT: the index is replaced wholesale, never patched.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from ammonomicon.domain.categories import WIKI_CATEGORIES, CategoryConfig, category_map
from ammonomicon.domain.lookup import (
    Collision,
    CollisionPolicy,
    LookupEntry,
    LookupIndex,
    build_lookup,
    resolve,
)
from ammonomicon.services._helpers import now_iso
from ammonomicon.services.base import BaseService
from ammonomicon.services.result import ServiceResult
from ammonomicon.services.telemetry import timed, trace_span, traced

if TYPE_CHECKING:
    from ammonomicon.config.settings import AmmoSettings
    from ammonomicon.infrastructure.store import CatalogStore

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    """One complete, immutable build of the catalog."""

    generation: int
    built_at: str
    all_data: Mapping[str, tuple[dict[str, Any], ...]]
    index: LookupIndex
    failures: Mapping[str, str] = field(default_factory=dict)
    collisions: tuple[Collision, ...] = ()

    def rows(self, category_id: str) -> tuple[dict[str, Any], ...]:
        """Rows of *category_id* (empty for unknown or failed categories)."""
        return self.all_data.get(category_id, ())

    def resolve(self, name: str) -> LookupEntry | None:
        return resolve(name, self.index)

    @property
    def row_count(self) -> int:
        return sum(len(rows) for rows in self.all_data.values())


class CatalogService(BaseService):
    """Builds and publishes the catalog lookup index.

    Parameters:
        store: Backing store addressed through ``fetch_all(location)``.
        categories: Category table in registration order.
        max_workers: Upper bound on concurrent category fetches.
        collision_policy: Which registration keeps a contested name.
    """

    def __init__(
        self,
        store: CatalogStore,
        categories: Iterable[CategoryConfig] = WIKI_CATEGORIES,
        *,
        max_workers: int = 8,
        collision_policy: CollisionPolicy = "first-wins",
    ) -> None:
        super().__init__(store)
        self._categories: tuple[CategoryConfig, ...] = tuple(categories)
        self._by_id = category_map(self._categories)
        self._max_workers = max(1, max_workers)
        self._collision_policy: CollisionPolicy = collision_policy
        self._snapshot: CatalogSnapshot | None = None
        self._lock = threading.Lock()
        self._started_generation = 0
        self._installed_generation = 0

    @classmethod
    def from_settings(cls, store: CatalogStore, settings: AmmoSettings) -> CatalogService:
        """Construct from resolved settings (categories + ``[index]`` section)."""
        return cls(
            store,
            settings.category_table,
            max_workers=settings.index.max_workers,
            collision_policy=settings.index.collision_policy,
        )

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def categories(self) -> tuple[CategoryConfig, ...]:
        return self._categories

    @property
    def snapshot(self) -> CatalogSnapshot | None:
        """The published snapshot, or None until the first build installs."""
        return self._snapshot

    @property
    def index(self) -> LookupIndex | None:
        snap = self._snapshot
        return snap.index if snap is not None else None

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    def get_category(self, category_id: str) -> CategoryConfig | None:
        return self._by_id.get(category_id)

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    @traced
    def refetch(self) -> ServiceResult:
        """Rebuild the index from a full fetch and publish it atomically.

        Never fails as a whole: per-category fetch failures become warnings
        and the affected categories contribute no entities.
        """
        with self._lock:
            self._started_generation += 1
            generation = self._started_generation

        with trace_span("fetch", categories=len(self._categories)) as span:
            rows_by_category, failures, timings = self._fetch_categories()
            if span:
                for cat_id, elapsed_ms in timings.items():
                    span.add_timing(cat_id, elapsed_ms, rows=len(rows_by_category[cat_id]))
                span.annotate(failed=len(failures))

        with trace_span("build_index") as span:
            build = build_lookup(
                self._categories,
                rows_by_category,
                policy=self._collision_policy,
            )
            if span:
                span.annotate(entries=len(build.index), collisions=len(build.collisions))

        snapshot = CatalogSnapshot(
            generation=generation,
            built_at=now_iso(),
            all_data=build.all_data,
            index=build.index,
            failures=dict(failures),
            collisions=build.collisions,
        )
        installed = self._install(snapshot)

        warnings: list[str] = [
            f"Category '{cat_id}' failed to load: {message}" for cat_id, message in failures.items()
        ]
        for collision in build.collisions:
            log.info("lookup.collision", key=collision.key, kept=collision.kept)
            warnings.append(f"Name collision {collision.describe()}")
        if not installed:
            warnings.append(f"Rebuild {generation} superseded by a newer rebuild; discarded")

        log.debug(
            "catalog.index_built",
            generation=generation,
            entries=len(build.index),
            rows=snapshot.row_count,
            failed=sorted(failures),
            installed=installed,
        )
        return ServiceResult(
            ok=True,
            op="refetch",
            data={
                "generation": generation,
                "installed": installed,
                "entries": len(build.index),
                "rows": {cat_id: len(rows) for cat_id, rows in build.all_data.items()},
                "failed": sorted(failures),
                "collisions": len(build.collisions),
            },
            warnings=warnings,
        )

    def _fetch_categories(
        self,
    ) -> tuple[dict[str, list[dict[str, Any]]], dict[str, str], dict[str, float]]:
        """Issue one ``fetch_all`` per category concurrently; join on all.

        Returns ``(rows_by_category, failures, timings)``. A category whose
        fetch raised is absent from the rows map and the timings, and present
        in *failures*.
        """
        rows_by_category: dict[str, list[dict[str, Any]]] = {}
        failures: dict[str, str] = {}
        timings: dict[str, float] = {}
        if not self._categories:
            return rows_by_category, failures, timings

        workers = min(self._max_workers, len(self._categories))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="catalog-fetch") as pool:
            futures: dict[str, Future[tuple[list[dict[str, Any]], float]]] = {
                cat.id: pool.submit(timed, self._store.fetch_all, cat.table)
                for cat in self._categories
            }
            for cat_id, future in futures.items():
                try:
                    rows_by_category[cat_id], timings[cat_id] = future.result()
                except Exception as exc:
                    failures[cat_id] = str(exc) or type(exc).__name__
                    log.warning(
                        "catalog.fetch_failed",
                        category=cat_id,
                        error=failures[cat_id],
                        exc_info=True,
                    )
        return rows_by_category, failures, timings

    def _install(self, snapshot: CatalogSnapshot) -> bool:
        """Publish *snapshot* unless a later-started rebuild already has."""
        with self._lock:
            if snapshot.generation < self._installed_generation:
                return False
            self._snapshot = snapshot
            self._installed_generation = snapshot.generation
            return True
