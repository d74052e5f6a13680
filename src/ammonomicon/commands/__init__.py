"""Subcommand modules for ammonomicon.

Provides register_commands() which uses deferred imports to keep
``ammonomicon --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the entry group and the standalone commands on the root group."""
    # --- Groups ---
    from ammonomicon.commands.entry import entry

    cli.add_command(entry)

    # --- Standalone commands ---
    from ammonomicon.commands.browse import categories, list_cmd
    from ammonomicon.commands.index import index
    from ammonomicon.commands.init_cmd import init_cmd
    from ammonomicon.commands.wiki import render, resolve, show

    cli.add_command(init_cmd)
    cli.add_command(index)
    cli.add_command(render)
    cli.add_command(show)
    cli.add_command(resolve)
    cli.add_command(list_cmd)
    cli.add_command(categories)
