"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from ammonomicon.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from ammonomicon.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    if result.op == "render":
        return str(result.data.get("text", ""))

    # For listings, return IDs only
    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(_extract_id(item) for item in items if _extract_id(item))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_id(item: Any) -> str:
    if isinstance(item, dict):
        val = item.get("id")
        if val is not None:
            return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="ammo.ok")
    op = Text(f"  {result.op}", style="ammo.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ammo.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="ammo.id")
    elif key in ("name", "label"):
        v = Text(str(value), style="ammo.title")
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":"), ensure_ascii=False))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{ak}={av}" for ak, av in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def units_text(units: list[dict[str, Any]]) -> Text:
    """Style serialized render units (``{"kind", "text", ...}`` dicts)."""
    text = Text()
    for unit in units:
        style = "ammo.link" if unit.get("kind") == "link" else ""
        text.append(str(unit.get("text", "")), style=style)
    return text


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    line = Text("ERROR", style="ammo.error")
    line.append(f"  {result.op}", style="ammo.op")
    line.append(f": {msg}")
    console.print(line)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/update/delete/save_page results."""
    _status_line(console, result)
    for key in ("category", "id", "page_name", "name", "fields", "created", "generation"):
        if key in result.data and result.data[key] is not None:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


# ── Index renderers ───────────────────────────────────────────────────


def _render_index(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render refetch / index_stats: entry count plus rows per category."""
    _status_line(console, result)
    d = result.data
    for key in ("generation", "built_at", "entries"):
        if key in d:
            _field(console, key, d[key])
    if result.op == "refetch" and not d.get("installed", True):
        console.print("  [ammo.warning]superseded[/ammo.warning]")

    rows = d.get("rows") or {}
    keys = d.get("keys") or {}
    if rows:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Category", style="ammo.id", no_wrap=True)
        table.add_column("Rows", justify="right")
        if keys:
            table.add_column("Names", justify="right")
        failed = set(d.get("failed", []))
        for cat_id, count in rows.items():
            cells: list[Any] = [cat_id, str(count)]
            if keys:
                cells.append(str(keys.get(cat_id, 0)))
            if cat_id in failed:
                cells[0] = Text(f"{cat_id} (failed)", style="ammo.error")
            table.add_row(*cells)
        console.print(table)

    collisions = d.get("collisions")
    if isinstance(collisions, list) and collisions:
        console.print(f"\n[bold]{len(collisions)} name collisions[/bold]")
        for item in collisions:
            console.print(Text(f"  - {item}"))
    if verbose:
        _render_meta(console, result)


# ── Wiki renderers ────────────────────────────────────────────────────


def _render_render(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render wiki text with cross-links highlighted, then link summary."""
    d = result.data
    if d.get("loading"):
        console.print(Text(str(d.get("text", ""))))
        console.print("\n[ammo.warning]catalog loading; links not resolved[/ammo.warning]")
        return

    console.print(units_text(d.get("units", [])))

    links = d.get("links", [])
    if links:
        console.print()
        for n, link in enumerate(links, start=1):
            line = Text(f"  [{n}] ")
            line.append(str(link["text"]), style="ammo.link")
            line.append(f" → {link['category']}/")
            line.append(str(link["id"]), style="ammo.id")
            console.print(line)
    unresolved = d.get("unresolved", [])
    if unresolved:
        console.print()
        for name in unresolved:
            line = Text("  ")
            line.append("unresolved", style="ammo.unresolved")
            line.append(f" :{name}:")
            console.print(line)
    if verbose:
        _render_meta(console, result)


def _render_resolve(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if not d.get("found"):
        console.print(Text("not found", style="ammo.unresolved"), Text(str(d.get("query", ""))))
        return
    _status_line(console, result)
    for key in ("category", "id", "name"):
        _field(console, key, d.get(key))


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback for show results when no details dispatcher drew them."""
    _status_line(console, result)
    entity = result.data.get("entity", {})
    _field(console, "category", result.data.get("category"))
    for key, value in entity.items():
        if value not in (None, ""):
            _field(console, key, value)


def _render_listing(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a category listing as a table."""
    d = result.data
    items = d.get("items", [])
    is_page = d.get("kind") == "page"

    title = Text(str(d.get("label", d.get("category", ""))), style="ammo.title")
    if d.get("search"):
        title.append(f"  (search: {d['search']})", style="dim")
    console.print(title)

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="ammo.id", no_wrap=True)
    table.add_column("Name", style=style_for_kind(str(d.get("kind", ""))))
    if is_page:
        table.add_column("Content")
    for item in items:
        row = [str(item.get("id", "")), str(item.get("name", ""))]
        if is_page:
            content = str(item.get("content") or "")
            row.append(content if len(content) <= 60 else content[:57] + "...")
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{d.get('count', len(items))} entries")


def _render_categories(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="ammo.id", no_wrap=True)
    table.add_column("Label", style="ammo.title")
    table.add_column("Kind")
    table.add_column("Rows", justify="right")
    if verbose:
        table.add_column("Table", style="dim")
        table.add_column("Linkable")
    for item in items:
        kind = str(item.get("kind", ""))
        rows = item.get("rows")
        row: list[Any] = [
            str(item.get("id", "")),
            str(item.get("label", "")),
            Text(kind, style=style_for_kind(kind)),
            "failed" if item.get("failed") else ("-" if rows is None else str(rows)),
        ]
        if verbose:
            row.append(str(item.get("table", "")))
            row.append("yes" if item.get("linkable") else "no")
        table.add_row(*row)
    console.print(table)


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("wiki_root", "config", "database", "seeded"):
        if key in result.data:
            _field(console, key, result.data[key])


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Mutations
    "create": _render_mutation,
    "update": _render_mutation,
    "delete": _render_mutation,
    "save_page": _render_mutation,
    # Index
    "refetch": _render_index,
    "index_stats": _render_index,
    # Wiki
    "render": _render_render,
    "resolve": _render_resolve,
    "show": _render_show,
    "list_category": _render_listing,
    "categories": _render_categories,
    # Init
    "init_wiki": _render_init,
}
