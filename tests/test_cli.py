"""Tests for the root ammonomicon CLI."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from ammonomicon import __version__
from ammonomicon.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "ammonomicon" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


@pytest.mark.parametrize("flag", ["--json", "-q", "-v", "--log-json"])
def test_global_flags_accepted(cli_runner: CliRunner, flag: str) -> None:
    assert cli_runner.invoke(cli, [flag, "--version"]).exit_code == 0


@pytest.mark.usefixtures("_isolated_wiki")
def test_invalid_config_reports_error(cli_runner: CliRunner, wiki_root: Path) -> None:
    (wiki_root / "ammonomicon.toml").write_text("[wiki\n", encoding="utf-8")
    result = cli_runner.invoke(cli, ["categories"])
    assert result.exit_code == 1
    assert "Invalid TOML" in result.output


@pytest.mark.usefixtures("_isolated_wiki")
def test_config_option_points_at_database(cli_runner: CliRunner, tmp_path: Path) -> None:
    other = tmp_path / "elsewhere"
    other.mkdir()
    config = other / "wiki.toml"
    config.write_text('[database]\npath = "catalog.db"\n', encoding="utf-8")
    result = cli_runner.invoke(cli, ["-c", str(config), "--json", "index"])
    assert result.exit_code == 0, result.output
    assert (other / "catalog.db").is_file()
