"""Commands: render wiki text and look names up."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ammonomicon.commands._base import AmmoCommand
from ammonomicon.domain.lookup import normalize_name
from ammonomicon.domain.rendering import CrossLink, cross_links
from ammonomicon.services.result import error_result

if TYPE_CHECKING:
    from ammonomicon.commands._context import AppContext


def _pick_link(links: list[CrossLink], choice: str) -> CrossLink | None:
    """Select a rendered link by 1-based position or by label."""
    if choice.isdigit():
        n = int(choice)
        return links[n - 1] if 1 <= n <= len(links) else None
    wanted = normalize_name(choice)
    for link in links:
        if normalize_name(link.label) == wanted:
            return link
    return None


@click.command(
    "render",
    cls=AmmoCommand,
    examples="""\
  ammonomicon render "Use the :Shotgun: near the :Lead Pipe: altar"
  ammonomicon render "Weak to :Shotgun: spread" --open Shotgun
  ammonomicon render "Weak to :Shotgun: spread" --open 1
  echo "See :The Lich:" | ammonomicon render -
  ammonomicon -q render "See :The Lich:\"""",
)
@click.argument("text")
@click.option(
    "--open",
    "open_link",
    default=None,
    metavar="LINK",
    help="Activate a rendered cross-link (label or number) and show its details.",
)
@click.pass_obj
def render(app: AppContext, text: str, open_link: str | None) -> None:
    """Render TEXT, turning :Name: references into cross-links.

    Pass ``-`` to read the text from stdin.
    """
    if text == "-":
        text = click.get_text_stream("stdin").read()

    result = app.wiki.render(text)
    if open_link is None:
        app.emit(result)
        return

    link = _pick_link(cross_links(app.wiki.render_units(text)), open_link)
    if link is None:
        app.emit(
            error_result("render", "NOT_FOUND", f"No cross-link '{open_link}' in the text")
        )
        return
    link.activate()

    # Machine-readable modes carry the opened entry in the single result.
    if app.settings.json_output or app.settings.quiet:
        result.data["opened"] = {"category": link.category_id, "entity": dict(link.entity)}
        app.emit(result)
        return
    app.emit(result)
    app.emit_details()


@click.command(
    "show",
    cls=AmmoCommand,
    examples="""\
  ammonomicon show Shotgun
  ammonomicon show "the lich"
  ammonomicon --json show "Old Red\"""",
)
@click.argument("name")
@click.pass_obj
def show(app: AppContext, name: str) -> None:
    """Open the detail view of the entry called NAME (case-insensitive)."""
    result = app.wiki.show(name)
    if result.ok and not (app.settings.json_output or app.settings.quiet):
        app.emit_details()
        return
    app.emit(result)


@click.command(
    "resolve",
    cls=AmmoCommand,
    examples="""\
  ammonomicon resolve "Lead Pipe"
  ammonomicon --json resolve "The Lich\"""",
)
@click.argument("name")
@click.pass_obj
def resolve(app: AppContext, name: str) -> None:
    """Report which entry, if any, a :NAME: reference resolves to."""
    app.emit(app.wiki.resolve(name))
