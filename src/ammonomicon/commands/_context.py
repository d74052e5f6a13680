"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy store and catalog initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ammonomicon.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from ammonomicon.config.settings import AmmoSettings
    from ammonomicon.infrastructure.store import CatalogStore
    from ammonomicon.output.details import DetailsDispatcher
    from ammonomicon.services.catalog import CatalogService
    from ammonomicon.services.result import ServiceResult
    from ammonomicon.services.wiki import WikiService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store and catalog are created on first use so ``--help`` and
    ``--version`` never touch the database.  The catalog is built (one
    full fetch) the first time a command asks for it.
    """

    def __init__(self, settings: AmmoSettings) -> None:
        self.settings = settings
        self._store: CatalogStore | None = None
        self._catalog: CatalogService | None = None
        self._details: DetailsDispatcher | None = None
        self._wiki: WikiService | None = None

        from ammonomicon.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            echo_sql=settings.database.echo,
        )

        if settings.verbose:
            from ammonomicon.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    @property
    def store(self) -> CatalogStore:
        """The catalog store (created lazily on first access)."""
        if self._store is None:
            from ammonomicon.infrastructure.store import CatalogStore

            self._store = CatalogStore(self.settings.db_path)
        return self._store

    @property
    def catalog(self) -> CatalogService:
        """The catalog service, with its first snapshot already built."""
        if self._catalog is None:
            from ammonomicon.services.catalog import CatalogService

            catalog = CatalogService.from_settings(self.store, self.settings)
            first = catalog.refetch()
            if not self.settings.json_output:
                for warning in first.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
            self._catalog = catalog
        return self._catalog

    @property
    def details(self) -> DetailsDispatcher:
        if self._details is None:
            from ammonomicon.output.details import DetailsDispatcher

            self._details = DetailsDispatcher()
        return self._details

    @property
    def wiki(self) -> WikiService:
        """WikiService wired to open details through :attr:`details`."""
        if self._wiki is None:
            from ammonomicon.services.wiki import WikiService

            self._wiki = WikiService(self.catalog, on_open=self.details.open_details)
        return self._wiki

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = self.output_settings
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def emit_details(self) -> None:
        """Print the currently open detail view (no-op when none is open)."""
        text = self.details.render(self.catalog.index)
        if text:
            click.echo(text)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
