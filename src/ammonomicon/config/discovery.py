"""Locating ``ammonomicon.toml``.

``AMMONOMICON_CONFIG`` (a file, or a wiki directory holding one) wins over
the walk-up search from the start directory towards the filesystem root.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "ammonomicon.toml"
CONFIG_ENV_VAR = "AMMONOMICON_CONFIG"


def config_at(path: Path) -> Path | None:
    """The config file *path* names: itself, or the one inside a wiki directory."""
    path = path.expanduser()
    candidate = path / CONFIG_FILENAME if path.is_dir() else path
    return candidate if candidate.is_file() else None


def search_path(start: Path | None = None) -> Iterator[Path]:
    """Yield every location the walk-up checks, nearest first."""
    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        yield directory / CONFIG_FILENAME


def find_config(start: Path | None = None) -> Path | None:
    """Return the config for a wiki at or above *start* (default: cwd), or None.

    A set ``AMMONOMICON_CONFIG`` disables the walk-up, even when it points
    at nothing.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return config_at(Path(override))
    return next((p for p in search_path(start) if p.is_file()), None)
