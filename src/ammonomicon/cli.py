"""Root CLI group for ammonomicon with global flags and command registration."""

from __future__ import annotations

import click

from ammonomicon import __version__
from ammonomicon.commands import register_commands
from ammonomicon.commands._context import AppContext
from ammonomicon.config.settings import AmmoSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="ammonomicon")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    help="Config file, or a wiki directory holding ammonomicon.toml.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """ammonomicon: Enter the Gungeon wiki with :wiki-link: cross-references."""
    ctx.ensure_object(dict)
    settings = AmmoSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
