"""Category registry: the data-driven map of every wiki category.

Each category names its backing table and which field(s) carry the display
name. The index builder reads only this table, so adding a category is a
configuration change, never a code change.

Declaration order matters: it is the registration order used when two
categories normalize to the same name (see ``domain.lookup``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel

CategoryKind = Literal["entity", "page"]


class CategoryConfig(BaseModel):
    """One wiki category.

    Attributes:
        id: Stable category identifier (also the detail-template key).
        kind: ``entity`` for row lists, ``page`` for a single free-text page.
        table: Backing store location.
        name_field: Field holding the display name. ``None`` opts the
            category out of the lookup index.
        alias_field: Secondary display name registered for duo rows.
        duo_flag_field: Boolean field marking a row as a merged duo.
        label: Human-readable title for listings.
    """

    model_config = {"frozen": True}

    id: str
    kind: CategoryKind = "entity"
    table: str
    name_field: str | None = "name"
    alias_field: str | None = None
    duo_flag_field: str | None = None
    label: str = ""

    @property
    def is_paged_text(self) -> bool:
        return self.kind == "page"

    @property
    def is_linkable(self) -> bool:
        return self.name_field is not None

    @property
    def title(self) -> str:
        return self.label or self.id.capitalize()

    def display_names(self, row: Mapping[str, Any]) -> list[str]:
        """Return every name *row* should be registered under, primary first.

        The alias is included only when the duo flag is truthy and the alias
        is non-empty. Null or blank names are skipped.
        """
        names: list[str] = []
        if self.name_field is None:
            return names
        primary = row.get(self.name_field)
        if isinstance(primary, str) and primary.strip():
            names.append(primary)
        if self.alias_field and self.duo_flag_field and row.get(self.duo_flag_field):
            alias = row.get(self.alias_field)
            if isinstance(alias, str) and alias.strip():
                names.append(alias)
        return names

    def select_rows(self, rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Narrow a full-table fetch to the rows this category owns.

        Entity categories own every row. Page categories share one table and
        own the single row whose name field equals the category id.
        """
        if not self.is_paged_text or self.name_field is None:
            return [dict(row) for row in rows]
        return [dict(row) for row in rows if row.get(self.name_field) == self.id]


WIKI_CATEGORIES: tuple[CategoryConfig, ...] = (
    CategoryConfig(id="guns", table="guns", label="Armas"),
    CategoryConfig(id="enemies", table="enemies", label="Enemigos"),
    CategoryConfig(id="items", table="items", label="Objetos"),
    CategoryConfig(
        id="bosses",
        table="bosses",
        alias_field="common_name",
        duo_flag_field="is_duo",
        label="Jefes",
    ),
    CategoryConfig(id="gungeoneers", table="gungeoneers", label="Armazmorristas"),
    CategoryConfig(id="npcs", table="npcs", label="NPCs"),
    CategoryConfig(id="altares", table="altares", label="Altares"),
    CategoryConfig(id="consumibles", table="consumibles", label="Consumibles"),
    CategoryConfig(id="secretos", table="secretos", label="Secretos"),
    CategoryConfig(
        id="maldicion", kind="page", table="text_pages", name_field="page_name", label="Maldición"
    ),
    CategoryConfig(
        id="genialidad",
        kind="page",
        table="text_pages",
        name_field="page_name",
        label="Genialidad",
    ),
)


def merge_categories(
    base: Iterable[CategoryConfig],
    overrides: Mapping[str, Mapping[str, Any]],
) -> tuple[CategoryConfig, ...]:
    """Apply ``[categories.<id>]`` overrides on top of *base*.

    Known ids are updated in place (declaration order kept); unknown ids are
    appended in the order given. A new category without a ``table`` uses its
    id as the table name.
    """
    merged: dict[str, CategoryConfig] = {cat.id: cat for cat in base}
    for cat_id, values in overrides.items():
        if cat_id in merged:
            current = merged[cat_id].model_dump()
            current.update(values)
            current["id"] = cat_id
            merged[cat_id] = CategoryConfig.model_validate(current)
        else:
            data = {"table": cat_id, **values, "id": cat_id}
            merged[cat_id] = CategoryConfig.model_validate(data)
    return tuple(merged.values())


def category_map(categories: Iterable[CategoryConfig]) -> dict[str, CategoryConfig]:
    """Index *categories* by id, preserving declaration order."""
    return {cat.id: cat for cat in categories}
