"""Trakt API service wrapper."""

from ...api.trakt import TraktApi
from ...config import DEFAULT_REDIRECT_URI


class TraktService:
    """
    Trakt API service wrapper with context manager support.

    Provides factory methods and automatic resource management.
    """

    def __init__(self, api: TraktApi):
        """
        Initialize Trakt service.

        Args:
            api: TraktApi instance
        """
        self._api = api

    @classmethod
    def from_config(cls, config, database):
        """
        Create TraktService from configuration.

        Args:
            config: Config object
            database: Database used to persist OAuth tokens

        Returns:
            TraktService instance
        """
        api = TraktApi(
            client_id=config.get("trakt.client_id"),
            client_secret=config.get("trakt.client_secret"),
            redirect_uri=config.get("trakt.redirect_uri", DEFAULT_REDIRECT_URI),
            database=database,
            timeout=config.get("trakt.timeout", 30),
        )
        return cls(api)

    def __enter__(self):
        """Enter context manager - return API instance."""
        return self._api

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager - close the HTTP session."""
        self._api.session.close()
        return False

    def is_authenticated(self):
        return self._api.is_authenticated()
