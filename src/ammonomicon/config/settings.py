"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs : CLI flags passed by Click
  2. Env vars    : ``AMMONOMICON_*`` prefix
  3. TOML file   : ``ammonomicon.toml`` discovered via walk-up
  4. Code defaults: baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`ammonomicon.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from ammonomicon.config.discovery import config_at, find_config
from ammonomicon.config.models import DatabaseConfig, IndexConfig, WikiConfig
from ammonomicon.domain.categories import WIKI_CATEGORIES, CategoryConfig, merge_categories


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from an ``ammonomicon.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class AmmoSettings(BaseSettings):
    """Unified settings for the ammonomicon CLI and library.

    Merges CLI flags, environment variables, TOML config sections, and
    code-baked defaults into a single frozen object.

    Attributes:
        wiki_root: Resolved wiki directory (parent of ``ammonomicon.toml``,
            or CWD if no config found).
        config_path: The TOML file in effect, or None.
        categories: ``[categories.<id>]`` overrides; see :attr:`category_table`.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "AMMONOMICON_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved path (not in TOML: derived from config location) ---
    wiki_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    wiki: WikiConfig = Field(default_factory=WikiConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    categories: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @property
    def db_path(self) -> Path:
        """Resolved SQLite database path."""
        from ammonomicon.infrastructure.database.engine import default_db_path

        if not self.database.path:
            return default_db_path(self.wiki_root)
        p = Path(self.database.path)
        return p if p.is_absolute() else self.wiki_root / p

    @property
    def category_table(self) -> tuple[CategoryConfig, ...]:
        """Built-in categories with ``[categories.<id>]`` overrides applied."""
        return merge_categories(WIKI_CATEGORIES, self.categories)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        wiki_root: Path | None = None,
        **cli_flags: Any,
    ) -> AmmoSettings:
        """Construct settings from CLI invocation.

        Discovers ``ammonomicon.toml`` via walk-up (or explicit
        *config_path*), resolves *wiki_root* from the config file's parent
        directory, and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            toml_path = config_at(Path(config_path))
        else:
            toml_path = find_config(wiki_root)

        resolved_root = wiki_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                wiki_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
