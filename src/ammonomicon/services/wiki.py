"""WikiService: read-side operations over the current catalog snapshot.

Reads only the :class:`CatalogSnapshot` published by :class:`CatalogService`.
Each call takes the snapshot reference once, so a concurrent rebuild never
changes the index under a half-rendered text.

Opening a detail view is delegated to the ``on_open`` callback handed in by
the caller; the service never knows how details are presented.
"""

from __future__ import annotations

from typing import Any

from ammonomicon.domain.links import extract_references
from ammonomicon.domain.lookup import resolve
from ammonomicon.domain.rendering import (
    CrossLink,
    OpenDetails,
    RenderUnit,
    cross_links,
    plain_text,
    render_wiki_text,
)
from ammonomicon.services._helpers import entry_summary
from ammonomicon.services.catalog import CatalogService, CatalogSnapshot
from ammonomicon.services.result import ServiceResult, error_result
from ammonomicon.services.telemetry import trace_span, traced


def _unit_to_dict(unit: RenderUnit) -> dict[str, Any]:
    if isinstance(unit, CrossLink):
        return {
            "kind": "link",
            "text": unit.label,
            "category": unit.category_id,
            "id": unit.entity.get("id", unit.entity.get("page_name")),
        }
    return {"kind": "text", "text": unit.text}


class WikiService:
    """Caller-facing operations over the current catalog snapshot."""

    def __init__(self, catalog: CatalogService, on_open: OpenDetails | None = None) -> None:
        self._catalog = catalog
        self._on_open = on_open

    @property
    def catalog(self) -> CatalogService:
        return self._catalog

    def _snapshot_or_error(self, op: str) -> CatalogSnapshot | ServiceResult:
        snapshot = self._catalog.snapshot
        if snapshot is None:
            return error_result(op, "NOT_LOADED", "The catalog has not been loaded yet")
        return snapshot

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_units(self, text: str | None) -> list[RenderUnit]:
        """Render *text* against the current snapshot (raw text while loading)."""
        return render_wiki_text(text, self._catalog.index, self._on_open)

    @traced
    def render(self, text: str) -> ServiceResult:
        """Render *text* and report its cross-links and unresolved references."""
        index = self._catalog.index
        with trace_span("render") as span:
            units = render_wiki_text(text, index, self._on_open)
            if span:
                span.annotate(units=len(units))

        unresolved: list[str] = []
        if index is not None:
            unresolved = [
                name for name in extract_references(text) if resolve(name, index) is None
            ]

        links = cross_links(units)
        return ServiceResult(
            ok=True,
            op="render",
            data={
                "text": plain_text(units),
                "units": [_unit_to_dict(u) for u in units],
                "links": [_unit_to_dict(link) for link in links],
                "unresolved": unresolved,
                "loading": index is None,
            },
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> ServiceResult:
        """Look *name* up. A miss is a successful result with ``found=False``."""
        entry = resolve(name, self._catalog.index)
        data: dict[str, Any] = {"query": name, "found": entry is not None}
        if entry is not None:
            cat = self._catalog.get_category(entry.category_id)
            name_field = cat.name_field if cat else "name"
            data.update(
                category=entry.category_id,
                **entry_summary(entry.entity, name_field),
            )
        return ServiceResult(ok=True, op="resolve", data=data)

    def show(self, name: str) -> ServiceResult:
        """Resolve *name* and dispatch an open-details request for it."""
        op = "show"
        entry = resolve(name, self._catalog.index)
        if entry is None:
            return error_result(op, "NOT_FOUND", f"No catalog entry named '{name}'", query=name)
        if self._on_open is not None:
            self._on_open(entry.entity, entry.category_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={"category": entry.category_id, "entity": dict(entry.entity)},
        )

    # ------------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------------

    def list_category(self, category_id: str, search: str | None = None) -> ServiceResult:
        """List a category's rows, optionally filtered by a name substring."""
        op = "list_category"
        cat = self._catalog.get_category(category_id)
        if cat is None:
            return error_result(
                op,
                "UNKNOWN_CATEGORY",
                f"Unknown category: '{category_id}'",
                known=[c.id for c in self._catalog.categories],
            )
        snapshot = self._snapshot_or_error(op)
        if isinstance(snapshot, ServiceResult):
            return snapshot

        rows = snapshot.rows(category_id)
        needle = search.strip().lower() if search else ""
        if needle and cat.name_field:
            rows = tuple(r for r in rows if needle in str(r.get(cat.name_field) or "").lower())

        warnings: list[str] = []
        if category_id in snapshot.failures:
            warnings.append(f"Category '{category_id}' failed to load; listing is empty")

        items = [entry_summary(row, cat.name_field) for row in rows]
        if cat.is_paged_text:
            for item, row in zip(items, rows, strict=True):
                item["content"] = row.get("content")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "category": cat.id,
                "label": cat.title,
                "kind": cat.kind,
                "search": search,
                "count": len(items),
                "items": items,
            },
            warnings=warnings,
        )

    def categories(self) -> ServiceResult:
        """Describe the category table with per-category row counts."""
        snapshot = self._catalog.snapshot
        items = [
            {
                "id": cat.id,
                "label": cat.title,
                "kind": cat.kind,
                "table": cat.table,
                "linkable": cat.is_linkable,
                "rows": len(snapshot.rows(cat.id)) if snapshot else None,
                "failed": bool(snapshot and cat.id in snapshot.failures),
            }
            for cat in self._catalog.categories
        ]
        return ServiceResult(ok=True, op="categories", data={"items": items})

    def index_stats(self) -> ServiceResult:
        """Summarize the published index: size, per-category counts, problems."""
        op = "index_stats"
        snapshot = self._snapshot_or_error(op)
        if isinstance(snapshot, ServiceResult):
            return snapshot
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "generation": snapshot.generation,
                "built_at": snapshot.built_at,
                "entries": len(snapshot.index),
                "rows": {cat_id: len(rows) for cat_id, rows in snapshot.all_data.items()},
                "keys": snapshot.index.counts_by_category(),
                "failed": sorted(snapshot.failures),
                "collisions": [c.describe() for c in snapshot.collisions],
            },
        )
