"""Tests for wiki-text rendering into plain-text and cross-link units."""

from __future__ import annotations

from typing import Any

import pytest

from ammonomicon.domain.categories import CategoryConfig
from ammonomicon.domain.lookup import build_lookup
from ammonomicon.domain.rendering import (
    CrossLink,
    PlainText,
    cross_links,
    plain_text,
    render_wiki_text,
)

G1: dict[str, Any] = {"id": "G1", "name": "Shotgun"}
LICH: dict[str, Any] = {"id": "B1", "name": "Lich", "common_name": "The Lich", "is_duo": True}


@pytest.fixture
def index():
    return build_lookup(
        [
            CategoryConfig(id="guns", table="guns"),
            CategoryConfig(
                id="bosses",
                table="bosses",
                alias_field="common_name",
                duo_flag_field="is_duo",
            ),
        ],
        {"guns": [G1], "bosses": [LICH]},
    ).index


class TestRenderWikiText:
    def test_scenario_mixed_links(self, index) -> None:
        units = render_wiki_text("Use the :Shotgun: near the :Lead Pipe: altar", index)
        assert units[0] == PlainText("Use the ")
        assert isinstance(units[1], CrossLink)
        assert units[1].entity is index["shotgun"].entity
        assert units[1].entity["id"] == "G1"
        assert units[2:] == [
            PlainText(" near the "),
            PlainText(":Lead Pipe:"),
            PlainText(" altar"),
        ]

    def test_unresolved_reference(self, index) -> None:
        units = render_wiki_text("See :Nonexistent: for details", index)
        assert units == [
            PlainText("See "),
            PlainText(":Nonexistent:"),
            PlainText(" for details"),
        ]
        assert cross_links(units) == []

    def test_duo_common_name_links(self, index) -> None:
        (by_common,) = cross_links(render_wiki_text(":The Lich:", index))
        (by_name,) = cross_links(render_wiki_text(":Lich:", index))
        assert by_common.entity is by_name.entity
        assert by_common.category_id == "bosses"

    def test_label_keeps_source_casing(self, index) -> None:
        (link,) = cross_links(render_wiki_text("a :SHOTGUN: b", index))
        assert link.label == "SHOTGUN"

    def test_loading_index_returns_raw_text(self) -> None:
        text = "Use the :Shotgun: now"
        assert render_wiki_text(text, None) == [PlainText(text)]

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty_text(self, index, text: str | None) -> None:
        assert render_wiki_text(text, index) == []

    def test_empty_index_shows_every_link_unresolved(self) -> None:
        units = render_wiki_text(":Shotgun:", {})
        assert units == [PlainText(":Shotgun:")]

    def test_plain_text_round_trip(self, index) -> None:
        text = "Use the :Shotgun: near the :Lead Pipe: altar"
        assert plain_text(render_wiki_text(text, index)) == (
            "Use the Shotgun near the :Lead Pipe: altar"
        )

    def test_does_not_mutate_index(self, index) -> None:
        before = dict(index)
        render_wiki_text(":Shotgun: :Nope:", index)
        assert dict(index) == before


class TestCrossLinkActivation:
    def test_activate_dispatches_open_details(self, index) -> None:
        opened: list[tuple[dict[str, Any], str]] = []
        units = render_wiki_text(
            "Beware :The Lich:", index, on_open=lambda e, c: opened.append((e, c))
        )
        (link,) = cross_links(units)
        link.activate()
        assert opened == [(index["the lich"].entity, "bosses")]
        assert opened[0][0] is index["lich"].entity

    def test_activate_without_handler_is_noop(self, index) -> None:
        (link,) = cross_links(render_wiki_text(":Shotgun:", index))
        link.activate()

    def test_rendering_never_calls_handler(self, index) -> None:
        calls: list[Any] = []
        render_wiki_text(":Shotgun:", index, on_open=lambda e, c: calls.append(e))
        assert calls == []
