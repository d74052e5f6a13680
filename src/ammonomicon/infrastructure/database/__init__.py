"""SQLite database engine and catalog schema via SQLAlchemy Core."""

from ammonomicon.infrastructure.database.engine import (
    create_db_engine,
    default_db_path,
    init_database,
)
from ammonomicon.infrastructure.database.schema import (
    ID_PREFIXES,
    altares,
    bosses,
    consumibles,
    enemies,
    gungeoneers,
    guns,
    items,
    metadata,
    npcs,
    secretos,
    text_pages,
)

__all__ = [
    "ID_PREFIXES",
    "altares",
    "bosses",
    "consumibles",
    "create_db_engine",
    "default_db_path",
    "enemies",
    "gungeoneers",
    "guns",
    "init_database",
    "items",
    "metadata",
    "npcs",
    "secretos",
    "text_pages",
]
