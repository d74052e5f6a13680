"""Lookup index: normalized entity name -> (category id, entity).

Built in one pass over every fetched category. The same pass produces the
raw-data-by-category map that listings read, so no extra fetch is needed.

INVARIANT: an index is never patched. A refresh builds a new one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal

from ammonomicon.domain.categories import CategoryConfig

CollisionPolicy = Literal["first-wins", "last-wins"]


def normalize_name(name: str) -> str:
    """Normalize a display name or link content for lookup (trim + lowercase)."""
    return name.strip().lower()


@dataclass(frozen=True)
class LookupEntry:
    """A resolved reference target."""

    category_id: str
    entity: dict[str, Any] = field(compare=False, hash=False)

    @property
    def entity_id(self) -> Any:
        return self.entity.get("id")


@dataclass(frozen=True)
class Collision:
    """Two registrations that normalized to the same key.

    ``kept`` and ``dropped`` are ``(category_id, entity_id)`` pairs.
    """

    key: str
    kept: tuple[str, Any]
    dropped: tuple[str, Any]

    def describe(self) -> str:
        return (
            f"'{self.key}': kept {self.kept[0]}/{self.kept[1]}, "
            f"dropped {self.dropped[0]}/{self.dropped[1]}"
        )


class LookupIndex(Mapping[str, LookupEntry]):
    """Read-only mapping from normalized name to :class:`LookupEntry`."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, LookupEntry] | None = None) -> None:
        self._entries: Mapping[str, LookupEntry] = MappingProxyType(dict(entries or {}))

    def __getitem__(self, key: str) -> LookupEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"LookupIndex({len(self._entries)} entries)"

    def counts_by_category(self) -> dict[str, int]:
        """Number of index keys pointing into each category."""
        counts: dict[str, int] = {}
        for entry in self._entries.values():
            counts[entry.category_id] = counts.get(entry.category_id, 0) + 1
        return counts


@dataclass(frozen=True)
class LookupBuild:
    """Result of one index build: the index plus its side channels."""

    all_data: Mapping[str, tuple[dict[str, Any], ...]]
    index: LookupIndex
    collisions: tuple[Collision, ...] = ()


def build_lookup(
    categories: Iterable[CategoryConfig],
    rows_by_category: Mapping[str, Iterable[Mapping[str, Any]]],
    *,
    policy: CollisionPolicy = "first-wins",
) -> LookupBuild:
    """Build the lookup index and the raw-data map from fetched rows.

    Categories are registered in declaration order and rows in fetch order.
    A category missing from *rows_by_category* (failed fetch) contributes
    zero entities. Duo rows register their alias as an extra key pointing at
    the same entity object.

    Args:
        categories: Category table, in registration order.
        rows_by_category: Full-table fetch results keyed by category id.
        policy: Which registration survives a key collision.
    """
    entries: dict[str, LookupEntry] = {}
    all_data: dict[str, tuple[dict[str, Any], ...]] = {}
    collisions: list[Collision] = []

    for cat in categories:
        rows = cat.select_rows(rows_by_category.get(cat.id, ()))
        all_data[cat.id] = tuple(rows)
        for row in rows:
            for name in cat.display_names(row):
                key = normalize_name(name)
                candidate = LookupEntry(category_id=cat.id, entity=row)
                existing = entries.get(key)
                if existing is None:
                    entries[key] = candidate
                    continue
                if existing.entity is row:
                    continue
                if policy == "last-wins":
                    entries[key] = candidate
                    kept, dropped = candidate, existing
                else:
                    kept, dropped = existing, candidate
                collisions.append(
                    Collision(
                        key=key,
                        kept=(kept.category_id, kept.entity_id),
                        dropped=(dropped.category_id, dropped.entity_id),
                    )
                )

    return LookupBuild(
        all_data=MappingProxyType(all_data),
        index=LookupIndex(entries),
        collisions=tuple(collisions),
    )


def resolve(link_content: Any, index: Mapping[str, LookupEntry] | None) -> LookupEntry | None:
    """Exact, case-insensitive lookup of *link_content* in *index*.

    Returns None for a miss, a missing index, or non-string input. An
    unresolved reference is the expected steady state, not an error.
    """
    if index is None or not isinstance(link_content, str):
        return None
    key = normalize_name(link_content)
    if not key:
        return None
    return index.get(key)
