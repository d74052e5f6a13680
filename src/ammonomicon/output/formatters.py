"""Rich/JSON output helpers.

The CLI renders ServiceResult for humans (Rich tables and panels) or
machines (--json). The formatter layer picks the output mode from
:class:`OutputSettings` and delegates to :mod:`ammonomicon.output.renderers`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ammonomicon.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output mode flags resolved from the global CLI options."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(
    result: ServiceResult,
    *,
    settings: OutputSettings | None = None,
    json_output: bool = False,
) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        settings: Output mode; takes precedence over *json_output*.
        json_output: Shorthand for ``OutputSettings(json_output=True)``.
    """
    if settings is None:
        settings = OutputSettings(json_output=json_output)

    if settings.json_output:
        return result.model_dump_json(indent=2)

    from ammonomicon.output.renderers import render_quiet, render_result

    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
