"""InitService: create a wiki directory with its config file and database."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ammonomicon.config.discovery import CONFIG_FILENAME
from ammonomicon.infrastructure.database.engine import default_db_path
from ammonomicon.infrastructure.store import CatalogStore
from ammonomicon.services._helpers import now_iso
from ammonomicon.services.result import ServiceResult, error_result

_CONFIG_TEMPLATE = """\
[wiki]
name = "{name}"
language = "{language}"

[index]
max_workers = 8
collision_policy = "first-wins"
"""

# A handful of cross-linked rows so a fresh wiki has something to render.
_SAMPLE_ROWS: dict[str, list[dict[str, Any]]] = {
    "guns": [
        {
            "name": "Shotgun",
            "quote": "Bang bang.",
            "quality": "D",
            "type": "Semiautomatic",
            "magazine_size": 6,
            "description": "A dependable spread weapon. Found near the :Old Red: shop.",
            "synergies": "Fires faster with :Shotgun Coffee:.",
        },
    ],
    "items": [
        {
            "name": "Shotgun Coffee",
            "quality": "D",
            "type": "Passive",
            "effect": "Shotguns fire faster; pairs with :Shotgun:.",
        },
    ],
    "npcs": [
        {
            "name": "Old Red",
            "role": "Shopkeeper",
            "description": "Sells :Shotgun Coffee: to passing Gungeoneers.",
        },
    ],
    "bosses": [
        {
            "name": "Lich",
            "name_2": "Phase Two",
            "common_name": "The Lich",
            "is_duo": True,
            "health": "1500",
            "health_2": "1500",
            "common_health": "3000",
            "description": "Master of the Gungeon. Weak to :Shotgun: spread.",
            "description_2": "Returns after the first defeat.",
        },
    ],
}


class InitService:
    """Wiki initialization (static: there is no store until this runs)."""

    @staticmethod
    def init_wiki(
        path: Path,
        *,
        name: str,
        language: str = "es",
        seed: bool = False,
    ) -> ServiceResult:
        op = "init_wiki"
        config_file = path / CONFIG_FILENAME
        if config_file.exists():
            return error_result(
                op,
                "ALREADY_INITIALIZED",
                f"{CONFIG_FILENAME} already exists in {path}",
                path=str(path),
            )

        path.mkdir(parents=True, exist_ok=True)
        config_file.write_text(
            _CONFIG_TEMPLATE.format(name=name.replace('"', "'"), language=language),
            encoding="utf-8",
        )

        db_path = default_db_path(path)
        store = CatalogStore(db_path)
        seeded = 0
        try:
            if seed:
                stamp = now_iso()
                with store.transaction() as txn:
                    for location, rows in _SAMPLE_ROWS.items():
                        for row in rows:
                            txn.insert_row(
                                location, {**row, "created_at": stamp, "modified_at": stamp}
                            )
                            seeded += 1
        except SQLAlchemyError as exc:
            return error_result(op, "STORE_ERROR", str(exc), exception=type(exc).__name__)
        finally:
            store.close()

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "wiki_root": str(path),
                "config": str(config_file),
                "database": str(db_path),
                "seeded": seeded,
            },
        )
