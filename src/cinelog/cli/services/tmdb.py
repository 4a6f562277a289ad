"""TMDB API service wrapper."""

from ...api.tmdb import TmdbApi


class TmdbService:
    """TMDB API service wrapper with context manager support."""

    def __init__(self, api: TmdbApi):
        self._api = api

    @classmethod
    def from_config(cls, config):
        """
        Create TmdbService from configuration.

        Args:
            config: Config object

        Returns:
            TmdbService instance
        """
        api = TmdbApi(
            api_key=config.get("tmdb.api_key"),
            timeout=config.get("tmdb.timeout", 10),
        )
        return cls(api)

    def __enter__(self):
        return self._api

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._api.session.close()
        return False
