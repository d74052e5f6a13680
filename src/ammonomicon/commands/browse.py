"""Commands: category listings and the category table."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ammonomicon.commands._base import CATEGORY, AmmoCommand

if TYPE_CHECKING:
    from ammonomicon.commands._context import AppContext


@click.command(
    "list",
    cls=AmmoCommand,
    examples="""\
  ammonomicon list guns
  ammonomicon list bosses --search lich
  ammonomicon -q list items
  ammonomicon --json list maldicion""",
)
@click.argument("category", type=CATEGORY)
@click.option("--search", "-s", default=None, help="Case-insensitive name filter.")
@click.pass_obj
def list_cmd(app: AppContext, category: str, search: str | None) -> None:
    """List the entries of CATEGORY."""
    app.emit(app.wiki.list_category(category, search=search))


@click.command(
    "categories",
    cls=AmmoCommand,
    examples="""\
  ammonomicon categories
  ammonomicon -v categories""",
)
@click.pass_obj
def categories(app: AppContext) -> None:
    """Show every category with its entry count."""
    app.emit(app.wiki.categories())
