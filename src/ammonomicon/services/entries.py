"""EntryService: mutations of catalog entries and pages.

Pipeline: VALIDATE → COERCE → APPLY → REINDEX → RESPOND

Every successful mutation is followed by a full :meth:`CatalogService.refetch`
so the published index never goes stale; incremental index patching is not
supported. Rebuild warnings (failed categories, name collisions) are
surfaced on the mutation's own result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, Integer, Table
from sqlalchemy.exc import SQLAlchemyError

from ammonomicon.domain.categories import CategoryConfig
from ammonomicon.infrastructure.store import StoreError
from ammonomicon.services._helpers import now_iso, parse_bool
from ammonomicon.services.base import BaseService
from ammonomicon.services.catalog import CatalogService
from ammonomicon.services.result import ServiceResult, error_result
from ammonomicon.services.telemetry import traced

if TYPE_CHECKING:
    from ammonomicon.infrastructure.store import CatalogStore

# Stamped by the service; never accepted from callers.
_MANAGED_FIELDS = frozenset({"id", "created_at", "modified_at"})


class _InvalidValue(ValueError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid value for '{field}': {reason}")
        self.field = field


def _coerce(table: Table, fields: dict[str, Any]) -> dict[str, Any]:
    """Convert CLI strings to the column types of *table*.

    Empty strings clear a field (stored as NULL).
    """
    values: dict[str, Any] = {}
    for key, raw in fields.items():
        if raw is None or (isinstance(raw, str) and raw == ""):
            values[key] = None
            continue
        column_type = table.c[key].type
        if isinstance(raw, str) and isinstance(column_type, Boolean):
            try:
                values[key] = parse_bool(raw)
            except ValueError as exc:
                raise _InvalidValue(key, str(exc)) from exc
        elif isinstance(raw, str) and isinstance(column_type, Integer):
            try:
                values[key] = int(raw)
            except ValueError as exc:
                raise _InvalidValue(key, f"expected an integer, got {raw!r}") from exc
        else:
            values[key] = raw
    return values


class EntryService(BaseService):
    """Mutations over catalog rows, each followed by an index rebuild."""

    def __init__(self, store: CatalogStore, catalog: CatalogService) -> None:
        super().__init__(store)
        self._catalog = catalog

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def create(self, category_id: str, fields: dict[str, Any]) -> ServiceResult:
        """Insert a new entry into an entity category."""
        op = "create"

        # ── VALIDATE ─────────────────────────────────────────
        cat = self._catalog.get_category(category_id)
        if cat is None:
            return _unknown_category(op, category_id, self._catalog)
        if cat.is_paged_text:
            extra = sorted(k for k in fields if k != "content")
            if extra:
                return error_result(
                    op,
                    "UNKNOWN_FIELD",
                    f"Page {cat.id} only takes 'content', got: {', '.join(extra)}",
                    fields=extra,
                )
            return self.save_page(category_id, str(fields.get("content") or ""))

        checked = self._checked_fields(op, cat, fields)
        if isinstance(checked, ServiceResult):
            return checked
        table = checked

        if cat.name_field and not str(fields.get(cat.name_field) or "").strip():
            return error_result(
                op,
                "NAME_REQUIRED",
                f"A '{cat.name_field}' is required to create a {cat.title} entry",
            )

        # ── COERCE ───────────────────────────────────────────
        try:
            values = _coerce(table, fields)
        except _InvalidValue as exc:
            return error_result(op, "INVALID_VALUE", str(exc), field=exc.field)
        stamp = now_iso()
        for column in ("created_at", "modified_at"):
            if column in table.c:
                values[column] = stamp

        # ── APPLY ────────────────────────────────────────────
        try:
            with self._store.transaction() as txn:
                row = txn.insert_row(cat.table, values)
        except (SQLAlchemyError, StoreError) as exc:
            return _store_error(op, exc)

        # ── REINDEX / RESPOND ────────────────────────────────
        return self._respond(
            op,
            {
                "category": cat.id,
                "id": row.get("id"),
                "name": row.get(cat.name_field) if cat.name_field else None,
            },
        )

    @traced
    def update(self, category_id: str, entry_id: str, fields: dict[str, Any]) -> ServiceResult:
        """Change fields of an existing entry."""
        op = "update"

        cat = self._catalog.get_category(category_id)
        if cat is None:
            return _unknown_category(op, category_id, self._catalog)

        if cat.is_paged_text:
            if entry_id != cat.id:
                return _not_found(op, cat, entry_id)
            if cat.name_field in fields:
                return error_result(
                    op,
                    "UNKNOWN_FIELD",
                    f"'{cat.name_field}' of page {cat.id} cannot be changed",
                    fields=[cat.name_field],
                )

        checked = self._checked_fields(op, cat, fields)
        if isinstance(checked, ServiceResult):
            return checked
        table = checked

        if cat.name_field in fields and not str(fields[cat.name_field] or "").strip():
            return error_result(op, "NAME_REQUIRED", f"'{cat.name_field}' cannot be blank")

        try:
            values = _coerce(table, fields)
        except _InvalidValue as exc:
            return error_result(op, "INVALID_VALUE", str(exc), field=exc.field)
        if "modified_at" in table.c:
            values["modified_at"] = now_iso()

        try:
            with self._store.transaction() as txn:
                changed = txn.update_row(cat.table, entry_id, values) if values else 0
                if not values and txn.get_row(cat.table, entry_id) is not None:
                    changed = 1
        except (SQLAlchemyError, StoreError) as exc:
            return _store_error(op, exc)

        if changed == 0:
            return _not_found(op, cat, entry_id)

        return self._respond(
            op,
            {"category": cat.id, "id": entry_id, "fields": sorted(fields)},
        )

    @traced
    def delete(self, category_id: str, entry_id: str) -> ServiceResult:
        """Remove an entry (or a page row, keyed by its page name)."""
        op = "delete"

        cat = self._catalog.get_category(category_id)
        if cat is None:
            return _unknown_category(op, category_id, self._catalog)
        # Page categories share a table; each may only touch its own row.
        if cat.is_paged_text and entry_id != cat.id:
            return _not_found(op, cat, entry_id)

        try:
            with self._store.transaction() as txn:
                removed = txn.delete_row(cat.table, entry_id)
        except (SQLAlchemyError, StoreError) as exc:
            return _store_error(op, exc)

        if removed == 0:
            return _not_found(op, cat, entry_id)

        return self._respond(op, {"category": cat.id, "id": entry_id})

    @traced
    def save_page(self, category_id: str, content: str) -> ServiceResult:
        """Create or replace the single text row of a page category."""
        op = "save_page"

        cat = self._catalog.get_category(category_id)
        if cat is None:
            return _unknown_category(op, category_id, self._catalog)
        if not cat.is_paged_text or cat.name_field is None:
            return error_result(
                op,
                "NOT_A_PAGE",
                f"Category '{category_id}' is not a page category",
            )

        stamp = now_iso()
        try:
            with self._store.transaction() as txn:
                existing = txn.get_row(cat.table, cat.id)
                if existing is None:
                    txn.insert_row(
                        cat.table,
                        {cat.name_field: cat.id, "content": content, "modified_at": stamp},
                    )
                else:
                    txn.update_row(cat.table, cat.id, {"content": content, "modified_at": stamp})
        except (SQLAlchemyError, StoreError) as exc:
            return _store_error(op, exc)

        return self._respond(
            op,
            {"category": cat.id, "page_name": cat.id, "created": existing is None},
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _checked_fields(
        self, op: str, cat: CategoryConfig, fields: dict[str, Any]
    ) -> Table | ServiceResult:
        """Resolve the category's table and reject unknown or managed fields."""
        try:
            table = self._store.table(cat.table)
        except StoreError as exc:
            return _store_error(op, exc)
        unknown = sorted(k for k in fields if k not in table.c or k in _MANAGED_FIELDS)
        if unknown:
            return error_result(
                op,
                "UNKNOWN_FIELD",
                f"Unknown or read-only field(s) for {cat.id}: {', '.join(unknown)}",
                fields=unknown,
            )
        return table

    def _respond(self, op: str, data: dict[str, Any]) -> ServiceResult:
        refreshed = self._catalog.refetch()
        data["generation"] = refreshed.data.get("generation")
        return ServiceResult(ok=True, op=op, data=data, warnings=list(refreshed.warnings))


def _unknown_category(op: str, category_id: str, catalog: CatalogService) -> ServiceResult:
    return error_result(
        op,
        "UNKNOWN_CATEGORY",
        f"Unknown category: '{category_id}'",
        known=[c.id for c in catalog.categories],
    )


def _not_found(op: str, cat: CategoryConfig, entry_id: str) -> ServiceResult:
    return error_result(
        op,
        "NOT_FOUND",
        f"No {cat.id} entry with id '{entry_id}'",
        category=cat.id,
        id=entry_id,
    )


def _store_error(op: str, exc: Exception) -> ServiceResult:
    return error_result(op, "STORE_ERROR", str(exc), exception=type(exc).__name__)
