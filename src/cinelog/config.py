"""Configuration management."""

import logging
import os
import sys
from pathlib import Path

import yaml


class ConfigError(Exception):
    """Configuration error."""
    pass


# Environment variables that fill gaps in the YAML file
ENV_FALLBACKS = {
    "trakt.client_id": "TRAKT_CLIENT_ID",
    "trakt.client_secret": "TRAKT_CLIENT_SECRET",
    "trakt.redirect_uri": "TRAKT_REDIRECT_URI",
    "tmdb.api_key": "TMDB_API_KEY",
}

DEFAULT_REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"


class Config:
    """Configuration container."""

    def __init__(self, config_path: str):
        """Load configuration from YAML file.

        Args:
            config_path: Path to config.yaml

        Raises:
            ConfigError: If config is invalid
        """
        self.config_path = Path(config_path)

        if not self.config_path.exists():
            raise ConfigError(
                f"Config file not found: {config_path}\n"
                "Copy config.example.yaml to config.yaml and fill in your settings."
            )

        try:
            with open(self.config_path) as f:
                self.data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}")

        if not isinstance(self.data, dict):
            raise ConfigError("Config file must contain a YAML mapping")

        self._validate()

    def _validate(self):
        """Validate required configuration."""
        if not self.get("trakt.client_id"):
            raise ConfigError(
                "trakt.client_id is required in config (or set TRAKT_CLIENT_ID)"
            )
        if not self.get("tmdb.api_key"):
            raise ConfigError(
                "tmdb.api_key is required in config (or set TMDB_API_KEY)"
            )

        max_errors = self.get("import.max_errors_shown", 10)
        if not isinstance(max_errors, int) or max_errors < 0:
            raise ConfigError("import.max_errors_shown must be a non-negative integer")

    def get(self, key: str, default=None):
        """Get config value by dot-notation key.

        Values missing from the file fall back to the environment variable
        listed in ENV_FALLBACKS, if any.

        Args:
            key: Dot-notation key (e.g., 'trakt.client_id')
            default: Default value if not found

        Returns:
            Config value or default
        """
        keys = key.split(".")
        value = self.data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                value = None
                break

            if value is None:
                break

        if value is None and key in ENV_FALLBACKS:
            value = os.environ.get(ENV_FALLBACKS[key]) or None

        return default if value is None else value


def _log_level(name: str) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


def setup_logging(config: Config):
    """Setup logging configuration.

    The optional log file also records the module name of every line.

    Args:
        config: Config object
    """
    log_level = _log_level(config.get("sync.log_level", "INFO"))
    log_file = config.get("sync.log_file")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    handlers = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        handlers.append(file_handler)

    # Replaces handlers left by an earlier invocation in the same process
    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for noisy in ("urllib3", "requests"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
