"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ammonomicon.toml only contains
overrides. A fresh wiki needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# --- ammonomicon.toml sections ---


class WikiConfig(BaseModel):
    """[wiki] section."""

    model_config = {"frozen": True}

    name: str = "Ammonomicon"
    language: str = "es"


class DatabaseConfig(BaseModel):
    """[database] section.

    ``path`` is relative to the wiki root unless absolute. Empty means
    ``.ammonomicon/ammonomicon.db``. ``echo`` logs every SQL statement
    through the CLI log handler.
    """

    model_config = {"frozen": True}

    path: str = ""
    echo: bool = False


class IndexConfig(BaseModel):
    """[index] section."""

    model_config = {"frozen": True}

    max_workers: int = Field(default=8, ge=1)
    collision_policy: Literal["first-wins", "last-wins"] = "first-wins"
