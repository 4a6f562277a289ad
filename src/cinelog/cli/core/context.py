"""Application context for CLI."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ...config import Config, ConfigError
from .exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_DB_PATH = "./cinelog.db"


@dataclass
class CinelogContext:
    """Shared application context passed through Click commands."""

    config: Config
    config_path: Path
    db_path: Path

    @classmethod
    def create(cls, config_path: Optional[str] = None, db_path: Optional[str] = None):
        """
        Build the context from CLI arguments.

        Resolution order for both paths: CLI flag, environment variable
        (CINELOG_CONFIG / CINELOG_DB), config value, default.

        Args:
            config_path: Path to config file from the command line
            db_path: Path to database file from the command line

        Returns:
            CinelogContext instance

        Raises:
            ConfigurationError: If config is invalid
        """
        resolved_config = config_path or os.environ.get("CINELOG_CONFIG") or DEFAULT_CONFIG_PATH

        try:
            config = Config(resolved_config)
        except ConfigError as e:
            raise ConfigurationError(str(e)) from e

        resolved_db = (
            db_path
            or os.environ.get("CINELOG_DB")
            or config.get("sync.database")
            or DEFAULT_DB_PATH
        )

        return cls(
            config=config,
            config_path=Path(resolved_config),
            db_path=Path(resolved_db),
        )
