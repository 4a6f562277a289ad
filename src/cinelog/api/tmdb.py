"""TMDB API client for movie, series and season details."""

import logging
from datetime import date
from typing import Optional

import requests

from ..models import EpisodeDetails, MediaDetails, MediaType, SeasonDetails

logger = logging.getLogger(__name__)


class TmdbApiError(Exception):
    """TMDB API error."""
    pass


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


class TmdbApi:
    """Client for The Movie Database API."""

    BASE_URL = "https://api.themoviedb.org/3"

    def __init__(self, api_key: Optional[str] = None, timeout: int = 10):
        """Initialize TMDB API client.

        Args:
            api_key: TMDB API key
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()

    def is_configured(self) -> bool:
        """Check if API key is configured.

        Returns:
            True if API key is set
        """
        return bool(self.api_key)

    def _get(self, endpoint: str, params: Optional[dict] = None) -> dict:
        """Make a GET request to TMDB.

        Raises:
            TmdbApiError: If the request fails, times out or returns bad JSON
        """
        if not self.is_configured():
            raise TmdbApiError("TMDB API key is not configured")

        query = {"api_key": self.api_key}
        query.update(params or {})

        try:
            response = self.session.get(
                f"{self.BASE_URL}{endpoint}",
                params=query,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout as e:
            raise TmdbApiError(f"TMDB request timed out: {endpoint}") from e
        except requests.RequestException as e:
            raise TmdbApiError(f"TMDB request failed for {endpoint}: {e}") from e
        except ValueError as e:
            raise TmdbApiError(f"Invalid JSON from TMDB for {endpoint}: {e}") from e

    def get_movie_details(self, tmdb_id: int) -> MediaDetails:
        """Get movie details.

        Args:
            tmdb_id: TMDB movie ID

        Returns:
            MediaDetails for the movie
        """
        data = self._get(f"/movie/{tmdb_id}")
        return MediaDetails(
            tmdb_id=tmdb_id,
            media_type=MediaType.MOVIE,
            title=data.get("title") or data.get("original_title") or "",
            release_date=_parse_date(data.get("release_date")),
            overview=data.get("overview"),
            poster_path=data.get("poster_path"),
        )

    def get_series_details(self, tmdb_id: int) -> MediaDetails:
        """Get series details.

        Args:
            tmdb_id: TMDB series ID

        Returns:
            MediaDetails for the series
        """
        data = self._get(f"/tv/{tmdb_id}")
        return MediaDetails(
            tmdb_id=tmdb_id,
            media_type=MediaType.SERIES,
            title=data.get("name") or data.get("original_name") or "",
            release_date=_parse_date(data.get("first_air_date")),
            overview=data.get("overview"),
            poster_path=data.get("poster_path"),
            number_of_episodes=data.get("number_of_episodes"),
        )

    def get_season_details(self, tmdb_id: int, season_number: int) -> SeasonDetails:
        """Get the episode listing of a season.

        Args:
            tmdb_id: TMDB series ID
            season_number: Season number

        Returns:
            SeasonDetails with per-episode air dates
        """
        data = self._get(f"/tv/{tmdb_id}/season/{season_number}")
        episodes = tuple(
            EpisodeDetails(
                season_number=episode.get("season_number", season_number),
                episode_number=episode["episode_number"],
                name=episode.get("name"),
                air_date=_parse_date(episode.get("air_date")),
            )
            for episode in data.get("episodes") or []
            if episode.get("episode_number") is not None
        )
        logger.debug("Fetched season %d of %d with %d episodes", season_number, tmdb_id, len(episodes))
        return SeasonDetails(season_number=season_number, episodes=episodes)
