"""Tests for the index CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from ammonomicon.cli import cli
from ammonomicon.infrastructure.database.engine import default_db_path
from ammonomicon.infrastructure.store import CatalogStore
from tests.conftest import insert_rows


@pytest.mark.usefixtures("_seeded_wiki")
class TestIndexCommand:
    def test_rebuild(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["index"])
        assert result.exit_code == 0, result.output
        assert "refetch" in result.stdout
        assert "entries: 7" in result.stdout

    def test_rebuild_json(self, cli_runner: CliRunner) -> None:
        data = json.loads(cli_runner.invoke(cli, ["--json", "index"]).stdout)
        assert data["data"]["installed"] is True
        assert data["data"]["rows"]["bosses"] == 1
        assert data["data"]["failed"] == []

    def test_stats(self, cli_runner: CliRunner) -> None:
        data = json.loads(cli_runner.invoke(cli, ["--json", "index", "--stats"]).stdout)
        assert data["op"] == "index_stats"
        assert data["data"]["keys"]["bosses"] == 2

    def test_collision_warning(self, cli_runner: CliRunner, wiki_root: Path) -> None:
        store = CatalogStore(default_db_path(wiki_root))
        try:
            insert_rows(store, {"enemies": [{"id": "enm_shotgun", "name": "shotgun"}]})
        finally:
            store.close()
        result = cli_runner.invoke(cli, ["--json", "index", "--stats"])
        data = json.loads(result.stdout)
        assert data["data"]["collisions"] == [
            "'shotgun': kept guns/gun_shotgun1, dropped enemies/enm_shotgun"
        ]

    def test_verbose_shows_telemetry(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "index"])
        assert result.exit_code == 0
        assert "CatalogService.refetch" in result.stdout
        assert "build_index" in result.stdout
