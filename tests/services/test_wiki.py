"""Tests for WikiService: render, resolve, show, and browse."""

from __future__ import annotations

from typing import Any

import pytest

from ammonomicon.services.catalog import CatalogService
from ammonomicon.services.wiki import WikiService
from tests.conftest import LICH, SHOTGUN, SHOTGUN_COFFEE, MemoryStore


@pytest.fixture
def opened() -> list[tuple[dict[str, Any], str]]:
    return []


@pytest.fixture
def wiki(catalog: CatalogService, opened: list[tuple[dict[str, Any], str]]) -> WikiService:
    return WikiService(catalog, on_open=lambda e, c: opened.append((e, c)))


@pytest.fixture
def unloaded() -> WikiService:
    return WikiService(CatalogService(MemoryStore()))


class TestRender:
    def test_mixed_resolved_and_unresolved(self, wiki: WikiService) -> None:
        result = wiki.render("Use the :Shotgun: near the :Lead Pipe: altar")
        assert result.ok
        assert result.data["text"] == "Use the Shotgun near the :Lead Pipe: altar"
        assert result.data["units"] == [
            {"kind": "text", "text": "Use the "},
            {"kind": "link", "text": "Shotgun", "category": "guns", "id": SHOTGUN["id"]},
            {"kind": "text", "text": " near the "},
            {"kind": "text", "text": ":Lead Pipe:"},
            {"kind": "text", "text": " altar"},
        ]
        assert [link["id"] for link in result.data["links"]] == [SHOTGUN["id"]]
        assert result.data["unresolved"] == ["Lead Pipe"]
        assert result.data["loading"] is False

    def test_render_does_not_open_details(
        self, wiki: WikiService, opened: list[tuple[dict[str, Any], str]]
    ) -> None:
        wiki.render(":Shotgun:")
        assert opened == []

    def test_while_loading_returns_raw_text(self, unloaded: WikiService) -> None:
        result = unloaded.render("Use the :Shotgun: now")
        assert result.data["units"] == [{"kind": "text", "text": "Use the :Shotgun: now"}]
        assert result.data["links"] == []
        assert result.data["unresolved"] == []
        assert result.data["loading"] is True

    def test_render_units_activate_on_open(
        self, wiki: WikiService, opened: list[tuple[dict[str, Any], str]]
    ) -> None:
        units = wiki.render_units("Ask about :The Lich:")
        units[-1].activate()  # type: ignore[union-attr]
        assert opened[0][1] == "bosses"
        assert opened[0][0]["id"] == LICH["id"]


class TestResolveAndShow:
    def test_resolve_hit(self, wiki: WikiService) -> None:
        result = wiki.resolve("  shotgun COFFEE ")
        assert result.ok
        assert result.data == {
            "query": "  shotgun COFFEE ",
            "found": True,
            "category": "items",
            "id": SHOTGUN_COFFEE["id"],
            "name": "Shotgun Coffee",
        }

    def test_resolve_miss_is_not_an_error(self, wiki: WikiService) -> None:
        result = wiki.resolve("Lead Pipe")
        assert result.ok
        assert result.data == {"query": "Lead Pipe", "found": False}

    def test_show_dispatches_open_details(
        self, wiki: WikiService, opened: list[tuple[dict[str, Any], str]]
    ) -> None:
        result = wiki.show("The Lich")
        assert result.ok
        assert result.data["category"] == "bosses"
        assert result.data["entity"]["common_name"] == "The Lich"
        assert len(opened) == 1
        assert opened[0][0]["id"] == LICH["id"]

    def test_show_miss(self, wiki: WikiService, opened: list[tuple[dict[str, Any], str]]) -> None:
        result = wiki.show("Lead Pipe")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail == {"query": "Lead Pipe"}
        assert opened == []

    def test_show_without_handler(self, catalog: CatalogService) -> None:
        assert WikiService(catalog).show("Shotgun").ok


class TestListCategory:
    def test_lists_rows(self, wiki: WikiService) -> None:
        result = wiki.list_category("guns")
        assert result.ok
        assert result.data["label"] == "Armas"
        assert result.data["count"] == 1
        assert result.data["items"] == [{"id": SHOTGUN["id"], "name": "Shotgun"}]

    def test_search_is_case_insensitive_substring(self, wiki: WikiService) -> None:
        hit = wiki.list_category("items", search="COFFEE")
        miss = wiki.list_category("items", search="pipe")
        assert hit.data["count"] == 1
        assert miss.data["count"] == 0
        assert miss.data["search"] == "pipe"

    def test_page_category_carries_content(self, wiki: WikiService) -> None:
        result = wiki.list_category("maldicion")
        assert result.data["kind"] == "page"
        (item,) = result.data["items"]
        assert item["id"] == "maldicion"
        assert item["content"] == "Cursed foes resist the :Shotgun:."

    def test_unknown_category(self, wiki: WikiService) -> None:
        result = wiki.list_category("shrines")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "UNKNOWN_CATEGORY"
        assert "guns" in result.error.detail["known"]

    def test_not_loaded(self, unloaded: WikiService) -> None:
        result = unloaded.list_category("guns")
        assert result.error is not None
        assert result.error.code == "NOT_LOADED"

    def test_failed_category_warns(self) -> None:
        catalog = CatalogService(MemoryStore({"npcs": RuntimeError("down")}))
        catalog.refetch()
        result = WikiService(catalog).list_category("npcs")
        assert result.ok
        assert result.data["items"] == []
        assert result.warnings == ["Category 'npcs' failed to load; listing is empty"]


class TestCategoriesAndStats:
    def test_categories(self, wiki: WikiService) -> None:
        items = {item["id"]: item for item in wiki.categories().data["items"]}
        assert len(items) == 11
        assert items["guns"]["rows"] == 1
        assert items["enemies"]["rows"] == 0
        assert items["genialidad"]["kind"] == "page"
        assert items["genialidad"]["table"] == "text_pages"
        assert items["bosses"]["failed"] is False

    def test_categories_before_load(self, unloaded: WikiService) -> None:
        items = unloaded.categories().data["items"]
        assert all(item["rows"] is None for item in items)

    def test_index_stats(self, wiki: WikiService) -> None:
        data = wiki.index_stats().data
        assert data["generation"] == 1
        # Shotgun, Shotgun Coffee, Lich, The Lich, Old Red, two page names
        assert data["entries"] == 7
        assert data["keys"]["bosses"] == 2
        assert data["rows"]["npcs"] == 1
        assert data["failed"] == []
        assert data["collisions"] == []

    def test_index_stats_not_loaded(self, unloaded: WikiService) -> None:
        result = unloaded.index_stats()
        assert result.error is not None
        assert result.error.code == "NOT_LOADED"
