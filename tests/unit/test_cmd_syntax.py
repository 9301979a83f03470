"""Unit tests for the syntax and help commands."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from spec_search.cli import cli as main
from spec_search.commands.syntax import cli
from spec_search.search import get_search_syntax_help


def test_prints_syntax_help() -> None:
    result = CliRunner().invoke(cli, [])
    assert result.exit_code == 0
    assert result.output.strip() == get_search_syntax_help().strip()


def test_syntax_through_group(temp_dir: Path) -> None:
    result = CliRunner().invoke(
        main, ["--quiet", "--config", str(temp_dir / "none.toml"), "syntax"]
    )
    assert result.exit_code == 0
    assert "Field Filters:" in result.output


def test_help_command_for_search(temp_dir: Path) -> None:
    result = CliRunner().invoke(
        main, ["--quiet", "--config", str(temp_dir / "none.toml"), "help", "search"]
    )
    assert result.exit_code == 0
    assert "--format" in result.output


def test_help_unknown_command(temp_dir: Path) -> None:
    result = CliRunner().invoke(
        main, ["--quiet", "--config", str(temp_dir / "none.toml"), "help", "nope"]
    )
    assert result.exit_code == 1
    assert "Unknown command: nope" in result.output
