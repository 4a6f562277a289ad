"""Library database service."""

from pathlib import Path

from ...db import Database


class DatabaseService:
    """
    Opens the library database for the duration of a command.

    Database connections are per call, so leaving the context only drops
    the reference.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self._db = None

    def __enter__(self) -> Database:
        """Open the library, creating its directory and schema on first use."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = Database(str(self.db_path))
        return self._db

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._db = None
        return False
