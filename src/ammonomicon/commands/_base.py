"""Click plumbing shared by the ammonomicon commands.

* ``--examples`` on an :class:`AmmoCommand` or :class:`AmmoGroup` prints the
  command's usage examples instead of running it, so ``--help`` stays short.
* :data:`CATEGORY` and :data:`PAGE_CATEGORY` complete category ids in the shell.
* :data:`FIELD` parses the ``KEY=VALUE`` pairs given to entry mutations.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click
from click.shell_completion import CompletionItem

from ammonomicon.domain.categories import WIKI_CATEGORIES, CategoryConfig


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = textwrap.dedent(getattr(ctx.command, "examples", None) or "").strip("\n")
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(textwrap.indent(examples, "  "))
    ctx.exit(0)


class _ExamplesMixin:
    """Adds an eager ``--examples`` flag, placed just before ``--help``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples

    def get_params(self, ctx: click.Context) -> list[click.Parameter]:
        params: list[click.Parameter] = super().get_params(ctx)  # type: ignore[misc]
        if not self.examples:
            return params
        flag = click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=_print_examples,
            help="Show usage examples.",
        )
        own = len(self.params)  # type: ignore[attr-defined]
        return [*params[:own], flag, *params[own:]]


class AmmoCommand(_ExamplesMixin, click.Command):
    """Command accepting ``examples=``."""


class AmmoGroup(_ExamplesMixin, click.Group):
    """Group accepting ``examples=``; its subcommands are :class:`AmmoCommand`."""

    command_class = AmmoCommand


class CategoryParam(click.ParamType):
    """A category id, completed from the configured category table.

    Unknown ids are passed through: the services answer them with
    ``UNKNOWN_CATEGORY`` and the list of known ids.
    """

    name = "category"

    def __init__(self, *, pages_only: bool = False) -> None:
        self.pages_only = pages_only

    def _categories(self, ctx: click.Context) -> tuple[CategoryConfig, ...]:
        app = ctx.find_root().obj
        settings = getattr(app, "settings", None)
        return settings.category_table if settings is not None else WIKI_CATEGORIES

    def shell_complete(
        self, ctx: click.Context, param: click.Parameter, incomplete: str
    ) -> list[CompletionItem]:
        return [
            CompletionItem(cat.id, help=cat.title)
            for cat in self._categories(ctx)
            if cat.id.startswith(incomplete) and (cat.is_paged_text or not self.pages_only)
        ]


class FieldAssignment(click.ParamType):
    """``KEY=VALUE`` converted to a ``(key, value)`` pair; VALUE may be empty."""

    name = "field"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> tuple[str, str]:
        if isinstance(value, tuple):
            return value
        key, sep, raw = str(value).partition("=")
        if not sep or not key.strip():
            self.fail(f"Expected KEY=VALUE, got {value!r}", param, ctx)
        return key.strip(), raw


CATEGORY = CategoryParam()
PAGE_CATEGORY = CategoryParam(pages_only=True)
FIELD = FieldAssignment()
