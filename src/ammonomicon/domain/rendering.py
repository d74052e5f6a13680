"""Wiki-text rendering: tokens + index -> inline render units.

The renderer is a pure projection: it never mutates the index or the text
and is safe to call on every redisplay. Its only side-effecting output is
the ``on_open`` callback carried by each :class:`CrossLink`, invoked when a
caller activates the link.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ammonomicon.domain.links import restore_delimiters, tokenize
from ammonomicon.domain.lookup import LookupEntry, resolve

OpenDetails = Callable[[dict[str, Any], str], None]


def _ignore_open(entity: dict[str, Any], category_id: str) -> None:
    return None


@dataclass(frozen=True)
class PlainText:
    """Non-interactive text, including unresolved ``:Name:`` references."""

    value: str

    @property
    def text(self) -> str:
        return self.value


@dataclass(frozen=True)
class CrossLink:
    """A resolved reference that opens the target's detail view."""

    label: str
    category_id: str
    entity: dict[str, Any] = field(compare=False, repr=False)
    on_open: OpenDetails = field(default=_ignore_open, compare=False, repr=False)

    @property
    def text(self) -> str:
        return self.label

    def activate(self) -> None:
        """Dispatch the open-details request for this link's target."""
        self.on_open(self.entity, self.category_id)


RenderUnit = PlainText | CrossLink


def render_wiki_text(
    text: str | None,
    index: Mapping[str, LookupEntry] | None,
    on_open: OpenDetails | None = None,
) -> list[RenderUnit]:
    """Render *text* into plain-text and cross-link units.

    * ``None``/empty text renders nothing.
    * ``index is None`` means the catalog has not loaded yet: the raw text
      comes back as one unit rather than flashing every link as broken.
    * Unresolved links keep their colons so editors can spot them, as a
      unit of their own.
    * Consecutive prose, including a link's guard whitespace, is one unit.
    """
    if not text:
        return []
    if index is None:
        return [PlainText(text)]

    handler = on_open or _ignore_open
    units: list[RenderUnit] = []
    # Adjacent text tokens (prose + guard whitespace) become one unit.
    pending: list[str] = []
    for token in tokenize(text):
        if not token.is_link:
            pending.append(token.content)
            continue
        if pending:
            units.append(PlainText("".join(pending)))
            pending = []
        entry = resolve(token.content, index)
        if entry is None:
            units.append(PlainText(restore_delimiters(token.content)))
        else:
            units.append(
                CrossLink(
                    label=token.content,
                    category_id=entry.category_id,
                    entity=entry.entity,
                    on_open=handler,
                )
            )
    if pending:
        units.append(PlainText("".join(pending)))
    return units


def plain_text(units: Sequence[RenderUnit]) -> str:
    """Flatten *units* to display text (cross-links show their label)."""
    return "".join(unit.text for unit in units)


def cross_links(units: Sequence[RenderUnit]) -> list[CrossLink]:
    """Return only the interactive units, in document order."""
    return [unit for unit in units if isinstance(unit, CrossLink)]
