"""Command group: create, edit, and remove catalog entries and pages."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import click

from ammonomicon.commands._base import CATEGORY, FIELD, PAGE_CATEGORY, AmmoGroup
from ammonomicon.services.entries import EntryService

if TYPE_CHECKING:
    from ammonomicon.commands._context import AppContext

_ENTRY_EXAMPLES = """\
  ammonomicon entry add guns -f name=Shotgun -f quality=D -f "description=Pairs with :Old Red:"
  ammonomicon entry edit guns gun_1a2b3c4d -f magazine_size=8
  ammonomicon entry remove guns gun_1a2b3c4d
  ammonomicon entry page maldicion "La :Maldición: aumenta con cada :Jammed: enemigo\""""


def _as_dict(
    _ctx: click.Context, _param: click.Parameter, pairs: tuple[tuple[str, str], ...]
) -> dict[str, str]:
    return dict(pairs)


_field_option = click.option(
    "--field",
    "-f",
    "fields",
    type=FIELD,
    multiple=True,
    callback=_as_dict,
    metavar="KEY=VALUE",
    help="Field to set (repeatable). An empty VALUE clears the field.",
)


@click.group(cls=AmmoGroup, examples=_ENTRY_EXAMPLES)
@click.pass_obj
def entry(app: AppContext) -> None:
    """Create, edit, and remove catalog entries."""


@entry.command(
    examples="""\
  ammonomicon entry add guns -f name=Shotgun -f magazine_size=6
  ammonomicon entry add bosses -f name=Lich -f is_duo=si -f "common_name=The Lich\""""
)
@click.argument("category", type=CATEGORY)
@_field_option
@click.pass_obj
def add(app: AppContext, category: str, fields: dict[str, str]) -> None:
    """Add an entry to CATEGORY, then rebuild the index."""
    app.emit(EntryService(app.store, app.catalog).create(category, fields))


@entry.command(
    examples="""\
  ammonomicon entry edit guns gun_1a2b3c4d -f quality=S
  ammonomicon entry edit npcs npc_0f0f0f0f -f notes="""
)
@click.argument("category", type=CATEGORY)
@click.argument("entry_id")
@_field_option
@click.pass_obj
def edit(app: AppContext, category: str, entry_id: str, fields: dict[str, str]) -> None:
    """Change fields of entry ENTRY_ID in CATEGORY."""
    app.emit(EntryService(app.store, app.catalog).update(category, entry_id, fields))


@entry.command(
    examples="""\
  ammonomicon entry remove guns gun_1a2b3c4d
  ammonomicon entry remove maldicion maldicion"""
)
@click.argument("category", type=CATEGORY)
@click.argument("entry_id")
@click.pass_obj
def remove(app: AppContext, category: str, entry_id: str) -> None:
    """Delete entry ENTRY_ID from CATEGORY."""
    app.emit(EntryService(app.store, app.catalog).delete(category, entry_id))


@entry.command(
    examples="""\
  ammonomicon entry page genialidad "Texto con :Shotgun:"
  ammonomicon entry page maldicion --file maldicion.txt"""
)
@click.argument("category", type=PAGE_CATEGORY)
@click.argument("content", required=False, default=None)
@click.option(
    "--file",
    "content_file",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read the page content from a file ('-' for stdin).",
)
@click.pass_obj
def page(
    app: AppContext,
    category: str,
    content: str | None,
    content_file: TextIO | None,
) -> None:
    """Replace the text of page CATEGORY (maldicion, genialidad)."""
    if content_file is not None:
        content = content_file.read()
    if content is None:
        raise click.UsageError("Provide CONTENT or --file.")
    app.emit(EntryService(app.store, app.catalog).save_page(category, content))
