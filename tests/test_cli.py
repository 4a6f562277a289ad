"""Tests for the cinelog command line."""

import pytest
from click.testing import CliRunner

from cinelog.cli import cli


@pytest.fixture
def cli_args(tmp_path, monkeypatch):
    """Global options pointing at a temporary config and library."""
    monkeypatch.delenv("CINELOG_CONFIG", raising=False)
    monkeypatch.delenv("CINELOG_DB", raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("""
trakt:
  client_id: abc
tmdb:
  api_key: xyz
sync:
  log_level: WARNING
""")
    return ["-c", str(config_path), "--db", str(tmp_path / "cinelog.db")]


def test_help_lists_commands(cli_args):
    result = CliRunner().invoke(cli, cli_args + ["--help"])

    assert result.exit_code == 0
    for name in ("import", "preview", "resync", "status", "sync", "trakt"):
        assert name in result.output


def test_status_when_not_connected(cli_args):
    result = CliRunner().invoke(cli, cli_args + ["status"])

    assert result.exit_code == 0
    assert "not connected" in result.output
    assert "cinelog trakt login" in result.output


def test_auto_sync_toggle(cli_args):
    runner = CliRunner()

    result = runner.invoke(cli, cli_args + ["trakt", "auto-sync", "on"])
    assert result.exit_code == 0
    assert "Auto sync enabled" in result.output

    result = runner.invoke(cli, cli_args + ["st"])
    assert "enabled" in result.output


def test_sync_requires_trakt_login(cli_args):
    result = CliRunner().invoke(cli, cli_args + ["sync"])

    assert result.exit_code == 1
    assert "cinelog trakt login" in result.output


def test_missing_config(tmp_path):
    result = CliRunner().invoke(cli, ["-c", str(tmp_path / "missing.yaml"), "status"])

    assert result.exit_code == 1
    assert "Configuration Error" in result.output
