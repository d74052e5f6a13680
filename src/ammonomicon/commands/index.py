"""Command: rebuild the lookup index or report on it."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ammonomicon.commands._base import AmmoCommand

if TYPE_CHECKING:
    from ammonomicon.commands._context import AppContext

_INDEX_EXAMPLES = """\
  ammonomicon index
  ammonomicon index --stats
  ammonomicon -v index
  ammonomicon --json index --stats"""


@click.command("index", cls=AmmoCommand, examples=_INDEX_EXAMPLES)
@click.option("--stats", is_flag=True, help="Report on the index instead of printing the build.")
@click.pass_obj
def index(app: AppContext, stats: bool) -> None:
    """Fetch every category and rebuild the name lookup index."""
    if stats:
        app.emit(app.wiki.index_stats())
        return

    from ammonomicon.services.catalog import CatalogService

    app.emit(CatalogService.from_settings(app.store, app.settings).refetch())
