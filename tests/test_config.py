"""Tests for configuration loading."""

import logging
import sys

import pytest

from cinelog.config import Config, ConfigError, setup_logging


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TRAKT_CLIENT_ID", "TRAKT_CLIENT_SECRET", "TRAKT_REDIRECT_URI", "TMDB_API_KEY"):
        monkeypatch.delenv(name, raising=False)


def test_load_config(tmp_path):
    """Test dot-notation access to nested values."""
    path = write_config(tmp_path, """
trakt:
  client_id: abc
  client_secret: def
tmdb:
  api_key: xyz
import:
  watchlist: true
  max_errors_shown: 5
""")

    config = Config(path)

    assert config.get("trakt.client_id") == "abc"
    assert config.get("import.watchlist") is True
    assert config.get("import.max_errors_shown") == 5
    assert config.get("import.movies", True) is True
    assert config.get("database.path", "cinelog.db") == "cinelog.db"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Config file not found"):
        Config(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = write_config(tmp_path, "trakt: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        Config(path)


def test_requires_trakt_client_id(tmp_path):
    path = write_config(tmp_path, "tmdb:\n  api_key: xyz\n")

    with pytest.raises(ConfigError, match="trakt.client_id"):
        Config(path)


def test_environment_fills_missing_keys(tmp_path, monkeypatch):
    """Test credentials can come from the environment."""
    monkeypatch.setenv("TRAKT_CLIENT_ID", "from-env")
    monkeypatch.setenv("TMDB_API_KEY", "tmdb-env")
    path = write_config(tmp_path, "sync:\n  log_level: DEBUG\n")

    config = Config(path)

    assert config.get("trakt.client_id") == "from-env"
    assert config.get("tmdb.api_key") == "tmdb-env"
    assert config.get("trakt.client_secret") is None


def test_file_wins_over_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("TRAKT_CLIENT_ID", "from-env")
    path = write_config(tmp_path, "trakt:\n  client_id: from-file\ntmdb:\n  api_key: xyz\n")

    assert Config(path).get("trakt.client_id") == "from-file"


def test_rejects_negative_max_errors(tmp_path):
    path = write_config(tmp_path, """
trakt:
  client_id: abc
tmdb:
  api_key: xyz
import:
  max_errors_shown: -1
""")

    with pytest.raises(ConfigError, match="max_errors_shown"):
        Config(path)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging(tmp_path, restore_root_logger):
    """Test console lines go to stdout and the optional log file is added."""
    log_file = tmp_path / "cinelog.log"
    path = write_config(tmp_path, f"""
trakt:
  client_id: abc
tmdb:
  api_key: xyz
sync:
  log_level: debug
  log_file: {log_file}
""")

    setup_logging(Config(path))

    console_handler, file_handler = restore_root_logger.handlers
    assert console_handler.stream is sys.stdout
    assert isinstance(file_handler, logging.FileHandler)
    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING
