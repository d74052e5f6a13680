"""Command: wiki initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from ammonomicon.commands._base import AmmoCommand

if TYPE_CHECKING:
    from ammonomicon.commands._context import AppContext

_INIT_EXAMPLES = """\
  ammonomicon init
  ammonomicon init /path/to/wiki --name "Ammonomicon"
  ammonomicon init . --language en --seed"""


@click.command("init", cls=AmmoCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--name", default=None, help="Wiki name (defaults to the directory name).")
@click.option("--language", default="es", show_default=True, help="Content language code.")
@click.option("--seed", is_flag=True, help="Insert a few cross-linked sample entries.")
@click.pass_obj
def init_cmd(
    app: AppContext,
    path: str,
    name: str | None,
    language: str,
    seed: bool,
) -> None:
    """Initialize a new wiki: config file and catalog database."""
    wiki_path = Path(path).resolve()

    from ammonomicon.services.init import InitService

    app.emit(
        InitService.init_wiki(
            wiki_path,
            name=name or wiki_path.name,
            language=language,
            seed=seed,
        )
    )
