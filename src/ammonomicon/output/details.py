"""Details view: the open-details dispatcher and per-category templates.

:class:`DetailsDispatcher` is the ``on_open`` target handed to the renderer:
activating a cross-link records ``(entity, category_id)`` as the current
detail request. :meth:`DetailsDispatcher.render` draws that request with the
template registered for its category in :data:`DETAIL_TEMPLATES`. Text
fields inside a template go through the same wiki-text renderer, so links in
a detail view open further detail views (one level per activation).

Templates are looked up by category id only. A category without a template
gets a "no detail template" panel instead of an exception.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

import structlog
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from ammonomicon.domain.lookup import LookupEntry
from ammonomicon.domain.rendering import (
    CrossLink,
    OpenDetails,
    RenderUnit,
    cross_links,
    render_wiki_text,
)
from ammonomicon.output.console import create_console, get_output

log = structlog.get_logger(__name__)

Index = Mapping[str, LookupEntry] | None


class DetailRequest(NamedTuple):
    entity: dict[str, Any]
    category_id: str


def wiki_text(units: list[RenderUnit]) -> Text:
    """Style render units: cross-links highlighted, everything else plain."""
    text = Text()
    for unit in units:
        if isinstance(unit, CrossLink):
            text.append(unit.label, style="ammo.link")
        else:
            text.append(unit.text)
    return text


# ---------------------------------------------------------------------------
# Template building blocks
# ---------------------------------------------------------------------------


class _Page:
    """Accumulates the renderables of one detail panel."""

    def __init__(self, index: Index, on_open: OpenDetails) -> None:
        self._index = index
        self._on_open = on_open
        self.parts: list[RenderableType] = []
        self.links: list[CrossLink] = []

    def line(self, value: str, style: str = "") -> None:
        self.parts.append(Text(value, style=style))

    def quote(self, value: Any) -> None:
        if value:
            self.parts.append(Text(f'"{value}"', style="ammo.quote"))

    def rule(self) -> None:
        self.parts.append(Rule(style="dim"))

    def heading(self, value: str) -> None:
        self.parts.append(Text(value, style="ammo.title"))

    def stats(self, pairs: list[tuple[str, Any]]) -> None:
        shown = [(label, value) for label, value in pairs if value not in (None, "")]
        if not shown:
            return
        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="ammo.key")
        grid.add_column()
        for label, value in shown:
            grid.add_row(label, str(value))
        self.parts.append(grid)

    def wiki(self, value: str | None, heading: str | None = None) -> None:
        if not value:
            return
        units = render_wiki_text(value, self._index, self._on_open)
        self.links.extend(cross_links(units))
        if heading:
            self.heading(heading)
        self.parts.append(wiki_text(units))


@dataclass(frozen=True)
class FieldLayout:
    """Data-driven detail layout.

    ``stats`` are shown verbatim as a label/value grid; ``sections`` are
    wiki-text fields rendered with cross-links under their heading.
    """

    stats: tuple[tuple[str, str], ...] = ()
    sections: tuple[tuple[str, str], ...] = (("description", "Descripción"),)
    empty: str | None = None

    def __call__(self, entity: dict[str, Any], page: _Page) -> str:
        page.quote(entity.get("quote"))
        page.stats([(label, entity.get(key)) for key, label in self.stats])
        shown = False
        for key, heading in self.sections:
            if entity.get(key):
                page.wiki(entity[key], heading)
                shown = True
        if not shown and self.empty:
            page.line(self.empty, style="dim")
        return str(entity.get("name") or "")


def _boss_layout(entity: dict[str, Any], page: _Page) -> str:
    """Bosses; duo rows show both individuals under the common name."""
    is_duo = bool(entity.get("is_duo"))
    first = entity.get("name") or "Entidad 1"
    second = entity.get("name_2") or "Entidad 2"

    if not is_duo:
        page.quote(entity.get("quote"))
    if entity.get("location"):
        page.line(str(entity["location"]), style="dim")

    if is_duo:
        page.heading(f"Detalles de {first}")
        page.quote(entity.get("quote"))
        page.wiki(entity.get("description"))
        page.rule()
        page.heading(f"Detalles de {second}")
        page.quote(entity.get("quote_2"))
        page.wiki(entity.get("description_2"))

    page.rule()
    page.heading("Estadísticas")
    stats: list[tuple[str, Any]] = []
    if is_duo:
        stats.append(("Vida Total", entity.get("common_health")))
        stats.append((f"Vida ({first})", entity.get("health") or "N/A"))
        stats.append((f"Vida ({second})", entity.get("health_2")))
    else:
        stats.append(("Vida", entity.get("health") or "N/A"))
    stats.append(("Fases", entity.get("phases") or "N/A"))
    page.stats(stats)

    if not is_duo:
        page.wiki(entity.get("description"), "Descripción")
    page.wiki(entity.get("attacks"), "Patrones de Ataque")
    page.wiki(entity.get("strategy"), "Estrategia")
    page.wiki(entity.get("notes"), "Notas")

    title = entity.get("common_name") if is_duo else entity.get("name")
    return str(title or entity.get("name") or "")


def _text_page_layout(entity: dict[str, Any], page: _Page) -> str:
    if entity.get("content"):
        page.wiki(entity["content"])
    else:
        page.line("No hay contenido disponible.", style="dim")
    return str(entity.get("page_name") or "")


DetailLayout = Callable[[dict[str, Any], _Page], str]

_NOTES = ("notes", "Notas")

DETAIL_TEMPLATES: dict[str, DetailLayout] = {
    "guns": FieldLayout(
        stats=(
            ("type", "Tipo"),
            ("quality", "Calidad"),
            ("class", "Clase"),
            ("sell_price", "Precio de Venta"),
            ("magazine_size", "Cargador"),
            ("max_ammo", "Munición Máx."),
            ("reload_time", "Recarga (s)"),
            ("damage", "Daño"),
            ("dps", "DPS"),
            ("fire_rate", "Cadencia"),
            ("shot_speed", "Vel. Disparo"),
            ("range", "Alcance"),
            ("force", "Fuerza"),
            ("spread", "Dispersión"),
        ),
        sections=(("description", "Descripción"), ("synergies", "Sinergias"), _NOTES),
    ),
    "enemies": FieldLayout(
        stats=(("location", "Ubicación"), ("health", "Vida"), ("damage", "Daño")),
        sections=(("description", "Descripción"), ("behavior", "Comportamiento"), _NOTES),
    ),
    "items": FieldLayout(
        stats=(("type", "Tipo"), ("quality", "Calidad")),
        sections=(
            ("description", "Descripción"),
            ("effect", "Efecto"),
            ("synergies", "Sinergias"),
            _NOTES,
        ),
    ),
    "bosses": _boss_layout,
    "gungeoneers": FieldLayout(
        stats=(("health", "Vida"), ("armor", "Armadura"), ("unlocked_by", "Desbloqueo")),
        sections=(
            ("description", "Descripción"),
            ("starting_weapon", "Arma Inicial"),
            ("starting_items", "Objetos Iniciales"),
            ("past", "Pasado"),
            _NOTES,
        ),
    ),
    "npcs": FieldLayout(
        stats=(("location", "Ubicación"), ("role", "Rol"), ("unlocked_by", "Desbloqueo")),
        sections=(("description", "Descripción"), ("services", "Servicios"), _NOTES),
        empty="No hay descripción disponible.",
    ),
    "altares": FieldLayout(
        stats=(("location", "Ubicación"), ("cost", "Coste")),
        sections=(("description", "Descripción"), ("effect", "Efecto"), _NOTES),
    ),
    "consumibles": FieldLayout(
        stats=(("type", "Tipo"), ("duration", "Duración")),
        sections=(("description", "Descripción"), ("effect", "Efecto"), _NOTES),
    ),
    "secretos": FieldLayout(
        stats=(("type", "Tipo"), ("location", "Ubicación")),
        sections=(("description", "Descripción"), ("how_to_find", "Cómo encontrarlo"), _NOTES),
    ),
    "maldicion": _text_page_layout,
    "genialidad": _text_page_layout,
}


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class DetailsDispatcher:
    """Holds the current open-details request and draws it.

    Pass :meth:`open_details` as the ``on_open`` callback of the renderer
    (or of :class:`~ammonomicon.services.wiki.WikiService`).
    """

    def __init__(self, templates: Mapping[str, DetailLayout] | None = None) -> None:
        self._templates = DETAIL_TEMPLATES if templates is None else templates
        self._current: DetailRequest | None = None
        self._links: list[CrossLink] = []

    @property
    def current(self) -> DetailRequest | None:
        return self._current

    @property
    def links(self) -> list[CrossLink]:
        """Cross-links drawn by the last :meth:`render`, in display order."""
        return list(self._links)

    def open_details(self, entity: dict[str, Any], category_id: str) -> None:
        self._current = DetailRequest(entity, category_id)
        log.debug("details.open", category=category_id, entity_id=entity.get("id"))

    def close_details(self) -> None:
        self._current = None
        self._links = []

    def panel(self, index: Index) -> Panel | None:
        """Build the Rich panel for the current request (None when closed)."""
        if self._current is None:
            return None
        entity, category_id = self._current
        layout = self._templates.get(category_id)
        if layout is None:
            self._links = []
            return Panel(
                Text(
                    f'No se encontró una plantilla de detalles para la categoría "{category_id}".',
                    style="ammo.warning",
                ),
                expand=False,
            )

        page = _Page(index, self.open_details)
        title = layout(entity, page)
        self._links = page.links
        return Panel(
            Group(*page.parts) if page.parts else Text(""),
            title=Text(title, style="ammo.title"),
            subtitle=Text(category_id, style="ammo.key"),
            expand=False,
        )

    def render(self, index: Index, *, width: int | None = None) -> str:
        """Render the current request to text (empty string when closed)."""
        panel = self.panel(index)
        if panel is None:
            return ""
        console = create_console(width=width)
        console.print(panel)
        return get_output(console).rstrip("\n")
