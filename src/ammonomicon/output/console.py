"""Rich Console factory and theme for ammonomicon output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  Emoji codes are off: wiki links
share their ``:name:`` syntax. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

AMMO_THEME = Theme(
    {
        "ammo.ok": "bold green",
        "ammo.error": "bold red",
        "ammo.warning": "bold yellow",
        "ammo.op": "bold cyan",
        "ammo.key": "dim",
        "ammo.id": "bold blue",
        "ammo.title": "bold",
        "ammo.link": "bold underline magenta",
        "ammo.unresolved": "yellow",
        "ammo.quote": "italic",
        "ammo.category.entity": "green",
        "ammo.category.page": "cyan",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=AMMO_THEME,
        no_color=no_color,
        highlight=False,
        emoji=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Return the Rich style name for a category kind (entity/page)."""
    return f"ammo.category.{kind}" if kind in ("entity", "page") else ""
