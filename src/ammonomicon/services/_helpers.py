"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (build stamps, modified_at)."""
    return datetime.now(UTC).isoformat()


def entry_summary(row: dict[str, Any], name_field: str | None) -> dict[str, Any]:
    """Reduce a catalog row to the fields listings show.

    Page rows have no ``id`` column; their name field doubles as the key.
    """
    name = row.get(name_field) if name_field else None
    return {
        "id": row.get("id", name),
        "name": name,
    }


def parse_bool(value: str) -> bool:
    """Parse a CLI boolean (``true/false``, ``1/0``, ``yes/no``, ``si/no``).

    Raises:
        ValueError: For anything else.
    """
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "y", "si", "sí"}:
        return True
    if lowered in {"0", "false", "no", "n", ""}:
        return False
    msg = f"Not a boolean value: {value!r}"
    raise ValueError(msg)
