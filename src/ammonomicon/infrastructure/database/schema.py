"""SQLAlchemy Core table definitions for the wiki catalog.

One table per entity category plus ``text_pages`` shared by the page
categories. Columns mirror what the listing and detail views display;
the lookup index itself only reads ``id`` and the name fields.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

metadata = MetaData()


def _common_columns() -> list[Column]:
    """Columns every entity table carries."""
    return [
        Column("id", Text, primary_key=True),
        Column("name", Text, nullable=False),
        Column("quote", Text),
        Column("description", Text),
        Column("notes", Text),
        Column("image_url", Text),
        Column("created_at", Text),
        Column("modified_at", Text),
    ]


guns = Table(
    "guns",
    metadata,
    *_common_columns(),
    Column("type", Text),
    Column("quality", Text),
    Column("class", Text),
    Column("magazine_size", Integer),
    Column("max_ammo", Integer),
    Column("reload_time", Text),
    Column("dps", Text),
    Column("damage", Text),
    Column("fire_rate", Text),
    Column("shot_speed", Text),
    Column("range", Text),
    Column("force", Text),
    Column("spread", Text),
    Column("sell_price", Text),
    Column("synergies", Text),
)

enemies = Table(
    "enemies",
    metadata,
    *_common_columns(),
    Column("location", Text),
    Column("health", Text),
    Column("damage", Text),
    Column("behavior", Text),
)

items = Table(
    "items",
    metadata,
    *_common_columns(),
    Column("type", Text),
    Column("quality", Text),
    Column("effect", Text),
    Column("synergies", Text),
)

bosses = Table(
    "bosses",
    metadata,
    *_common_columns(),
    Column("location", Text),
    Column("health", Text),
    Column("phases", Integer),
    Column("attacks", Text),
    Column("strategy", Text),
    # Duo bosses: two individuals merged into one row
    Column("is_duo", Boolean, default=False, server_default="0"),
    Column("common_name", Text),
    Column("common_health", Text),
    Column("name_2", Text),
    Column("quote_2", Text),
    Column("health_2", Text),
    Column("description_2", Text),
    Column("image_url_2", Text),
)

gungeoneers = Table(
    "gungeoneers",
    metadata,
    *_common_columns(),
    Column("starting_weapon", Text),
    Column("starting_items", Text),
    Column("armor", Integer),
    Column("health", Integer),
    Column("past", Text),
    Column("unlocked_by", Text),
)

npcs = Table(
    "npcs",
    metadata,
    *_common_columns(),
    Column("location", Text),
    Column("role", Text),
    Column("services", Text),
    Column("unlocked_by", Text),
    Column("dialogue", Text),
)

altares = Table(
    "altares",
    metadata,
    *_common_columns(),
    Column("location", Text),
    Column("effect", Text),
    Column("cost", Text),
)

consumibles = Table(
    "consumibles",
    metadata,
    *_common_columns(),
    Column("type", Text),
    Column("effect", Text),
    Column("duration", Text),
)

secretos = Table(
    "secretos",
    metadata,
    *_common_columns(),
    Column("type", Text),
    Column("location", Text),
    Column("how_to_find", Text),
)

text_pages = Table(
    "text_pages",
    metadata,
    Column("page_name", Text, primary_key=True),
    Column("content", Text),
    Column("modified_at", Text),
)

# ---------------------------------------------------------------------------
# Indexes for the name-ordered listings
# ---------------------------------------------------------------------------

for _table in (guns, enemies, items, bosses, gungeoneers, npcs, altares, consumibles, secretos):
    Index(f"ix_{_table.name}_name", _table.c.name)

# Short id prefixes per table, e.g. ``gun_1a2b3c4d``.
ID_PREFIXES: dict[str, str] = {
    "guns": "gun",
    "enemies": "enm",
    "items": "itm",
    "bosses": "bos",
    "gungeoneers": "gng",
    "npcs": "npc",
    "altares": "alt",
    "consumibles": "con",
    "secretos": "sec",
}
