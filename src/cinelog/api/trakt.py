"""Trakt.tv API client for OAuth and watch history."""

import logging
import threading
import time
import uuid
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import requests

from ..models import AuthUrl, HistoryItem, MediaType, WatchedEpisode, WatchedSeries

if TYPE_CHECKING:
    from ..db import Database

logger = logging.getLogger(__name__)


class TraktApiError(Exception):
    """Trakt API error."""
    pass


class TraktAuthError(TraktApiError):
    """Raised when there is no valid Trakt session."""
    pass


_TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a Trakt timestamp into an aware UTC datetime.

    Args:
        value: Timestamp string (e.g. '2024-01-15T20:00:00.000Z')

    Returns:
        Parsed datetime, or None if missing or unparseable
    """
    if not value:
        return None

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
        for fmt in _TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        logger.debug("Unparseable Trakt timestamp: %s", value)
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_start_at(since: datetime) -> str:
    """Format a lower bound for Trakt's ``start_at`` parameter."""
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def _tmdb_id(media: Optional[dict]) -> Optional[int]:
    if not media:
        return None
    value = (media.get("ids") or {}).get("tmdb")
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class TraktApi:
    """Client for the Trakt.tv API."""

    BASE_URL = "https://api.trakt.tv"
    AUTHORIZE_URL = "https://trakt.tv/oauth/authorize"
    API_VERSION = "2"
    USER_AGENT = "cinelog/1.0 (Personal Cinema Tracker)"
    PAGE_LIMIT = 1000
    MIN_REQUEST_INTERVAL = 0.05  # seconds
    RATE_LIMIT_BACKOFF = 2.0  # seconds
    TOKEN_EXPIRY_BUFFER = 60  # seconds

    def __init__(
        self,
        client_id: str,
        client_secret: Optional[str] = None,
        redirect_uri: str = "urn:ietf:wg:oauth:2.0:oob",
        database: Optional["Database"] = None,
        timeout: int = 30,
    ):
        """Initialize Trakt API client.

        Args:
            client_id: Trakt application client ID
            client_secret: Trakt application client secret
            redirect_uri: OAuth redirect URI
            database: Database used to persist OAuth tokens
            timeout: Request timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.database = database
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": self.USER_AGENT,
            "trakt-api-version": self.API_VERSION,
            "trakt-api-key": self.client_id,
        })

        self._token: Optional[Dict] = None
        self._token_loaded = False
        self._request_lock = threading.Lock()
        self._last_request = 0.0

    # ------------------------------------------------------------- tokens --

    def _load_token(self) -> Optional[Dict]:
        if not self._token_loaded:
            if self.database is not None:
                settings = self.database.get_trakt_settings()
                if settings["access_token"] and settings["expires_at"]:
                    self._token = {
                        "access_token": settings["access_token"],
                        "refresh_token": settings["refresh_token"],
                        "expires_at": settings["expires_at"],
                    }
            self._token_loaded = True
        return self._token

    def _store_token(self, access_token: str, refresh_token: str, expires_in: int):
        expires_at = datetime.now(timezone.utc) + timedelta(
            seconds=expires_in - self.TOKEN_EXPIRY_BUFFER
        )
        self._token = {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "expires_at": expires_at,
        }
        self._token_loaded = True
        if self.database is not None:
            self.database.save_trakt_tokens(access_token, refresh_token, expires_at)

    def _access_token(self) -> Optional[str]:
        token = self._load_token()
        if token and token["expires_at"] > datetime.now(timezone.utc):
            return token["access_token"]
        return None

    def is_authenticated(self) -> bool:
        """Check if a non-expired access token is available."""
        return self._access_token() is not None

    def clear_tokens(self):
        """Forget the stored access and refresh tokens."""
        self._token = None
        self._token_loaded = True
        if self.database is not None:
            self.database.clear_trakt_tokens()

    # -------------------------------------------------------------- OAuth --

    def get_auth_url(self) -> AuthUrl:
        """Build the OAuth authorization URL.

        Returns:
            AuthUrl with the URL to open and the state token
        """
        state = uuid.uuid4().hex
        query = urlencode({
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "state": state,
        })
        return AuthUrl(url=f"{self.AUTHORIZE_URL}?{query}", state=state)

    def exchange_code(self, code: str):
        """Exchange an OAuth authorization code for tokens.

        Args:
            code: Authorization code entered by the user

        Raises:
            TraktAuthError: If the exchange fails
        """
        if not self.client_secret:
            raise TraktAuthError("trakt.client_secret is required to connect your account")

        payload = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }

        try:
            response = self.session.post(
                f"{self.BASE_URL}/oauth/token",
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TraktAuthError(f"Network error during token exchange: {e}") from e

        if response.status_code != 200:
            raise TraktAuthError(
                f"Token exchange failed: {response.status_code} - {response.text}"
            )

        try:
            data = response.json()
            self._store_token(
                data["access_token"],
                data.get("refresh_token", ""),
                int(data["expires_in"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise TraktAuthError(f"Failed to parse token response: {e}") from e

        logger.info("Connected to Trakt")

    # ------------------------------------------------------------ requests --

    def _wait_for_rate_limit(self):
        with self._request_lock:
            elapsed = time.monotonic() - self._last_request
            if elapsed < self.MIN_REQUEST_INTERVAL:
                time.sleep(self.MIN_REQUEST_INTERVAL - elapsed)
            self._last_request = time.monotonic()

    def _get(self, endpoint: str, params: Optional[dict] = None) -> requests.Response:
        """Make an authenticated GET request.

        Raises:
            TraktAuthError: If not authenticated or the token was rejected
            TraktApiError: On any other failure
        """
        access_token = self._access_token()
        if not access_token:
            raise TraktAuthError(
                "Not authenticated with Trakt. Please connect your account first."
            )

        headers = {"Authorization": f"Bearer {access_token}"}
        url = f"{self.BASE_URL}{endpoint}"

        for attempt in range(2):
            self._wait_for_rate_limit()
            try:
                response = self.session.get(
                    url, params=params, headers=headers, timeout=self.timeout
                )
            except requests.RequestException as e:
                raise TraktApiError(f"Network error: {e}") from e

            if response.status_code == 200:
                return response
            if response.status_code == 401:
                raise TraktAuthError(
                    "Trakt authentication expired. Please reconnect your account."
                )
            if response.status_code == 429 and attempt == 0:
                logger.debug("Trakt rate limit hit, retrying in %.1fs", self.RATE_LIMIT_BACKOFF)
                time.sleep(self.RATE_LIMIT_BACKOFF)
                continue
            if response.status_code == 429:
                raise TraktApiError("Trakt API rate limited")

            raise TraktApiError(
                f"Trakt API error: {response.status_code} - {response.text}"
            )

        raise TraktApiError("Trakt API rate limited")

    def _get_list(self, endpoint: str, params: Optional[dict] = None) -> List[dict]:
        """Fetch every page of a paginated list endpoint."""
        items: List[dict] = []
        page = 1

        while True:
            page_params = dict(params or {})
            page_params.update({"page": page, "limit": self.PAGE_LIMIT})
            response = self._get(endpoint, page_params)

            try:
                data = response.json()
            except ValueError as e:
                raise TraktApiError(f"Invalid JSON from {endpoint}: {e}") from e

            if not isinstance(data, list):
                raise TraktApiError(f"Unexpected response from {endpoint}")
            items.extend(data)

            try:
                page_count = int(response.headers.get("X-Pagination-Page-Count", 1))
            except (TypeError, ValueError):
                page_count = 1
            if page >= page_count:
                return items
            page += 1

    # ------------------------------------------------------------- history --

    def _parse_history_item(self, entry: dict, key: str, media_type: MediaType) -> Optional[HistoryItem]:
        media = entry.get(key)
        tmdb_id = _tmdb_id(media)
        if tmdb_id is None:
            return None
        return HistoryItem(
            tmdb_id=tmdb_id,
            media_type=media_type,
            title=media.get("title") or "",
            watched_at=parse_timestamp(entry.get("watched_at")),
        )

    def get_watched_movies(self, since: Optional[datetime] = None) -> List[HistoryItem]:
        """Get watched movies from Trakt history.

        Args:
            since: Only return watches at or after this time

        Returns:
            One HistoryItem per watch, newest first as returned by Trakt
        """
        params = {"start_at": format_start_at(since)} if since else None
        entries = self._get_list("/sync/history/movies", params)

        items = []
        for entry in entries:
            item = self._parse_history_item(entry, "movie", MediaType.MOVIE)
            if item:
                items.append(item)

        logger.debug("Fetched %d movie watches from Trakt", len(items))
        return items

    def get_watched_shows_with_episodes(self, since: Optional[datetime] = None) -> List[WatchedSeries]:
        """Get watched shows with every episode watch from Trakt history.

        Episodes are returned per watch, rewatches included.

        Args:
            since: Only return watches at or after this time

        Returns:
            List of WatchedSeries grouped by show TMDB ID
        """
        params = {"start_at": format_start_at(since)} if since else None
        entries = self._get_list("/sync/history/shows", params)

        shows: "OrderedDict[int, dict]" = OrderedDict()
        for entry in entries:
            show = entry.get("show")
            episode = entry.get("episode")
            tmdb_id = _tmdb_id(show)
            if tmdb_id is None or not episode or episode.get("number") is None:
                continue

            group = shows.setdefault(tmdb_id, {"title": show.get("title") or "", "episodes": []})
            group["episodes"].append(
                WatchedEpisode(
                    season_number=int(episode.get("season") or 0),
                    episode_number=int(episode["number"]),
                    watched_at=parse_timestamp(entry.get("watched_at")),
                )
            )

        result = []
        for tmdb_id, group in shows.items():
            timestamps = [ep.watched_at for ep in group["episodes"] if ep.watched_at]
            result.append(
                WatchedSeries(
                    tmdb_id=tmdb_id,
                    title=group["title"],
                    last_watched_at=max(timestamps) if timestamps else None,
                    watched_episodes=tuple(group["episodes"]),
                )
            )

        logger.debug(
            "Fetched %d series with %d episode watches from Trakt",
            len(result),
            sum(len(s.watched_episodes) for s in result),
        )
        return result

    def get_ratings(self) -> Dict[Tuple[int, MediaType], int]:
        """Get the user's movie and show ratings.

        Returns:
            Dict mapping (tmdb_id, media_type) to rating (1-10)
        """
        entries = self._get_list("/sync/ratings")
        ratings: Dict[Tuple[int, MediaType], int] = {}

        for entry in entries:
            rating = entry.get("rating")
            item_type = entry.get("type")
            if rating is None:
                continue
            if item_type == "movie":
                key = (_tmdb_id(entry.get("movie")), MediaType.MOVIE)
            elif item_type == "show":
                key = (_tmdb_id(entry.get("show")), MediaType.SERIES)
            else:
                continue
            if key[0] is not None:
                ratings[key] = int(rating)

        logger.debug("Fetched %d ratings from Trakt", len(ratings))
        return ratings

    def get_watchlist(self) -> List[HistoryItem]:
        """Get watchlist movies and shows.

        Returns:
            HistoryItems with no watched_at
        """
        entries = self._get_list("/sync/watchlist")
        items = []

        for entry in entries:
            item_type = entry.get("type")
            if item_type == "movie":
                media = entry.get("movie")
                media_type = MediaType.MOVIE
            elif item_type == "show":
                media = entry.get("show")
                media_type = MediaType.SERIES
            else:
                continue

            tmdb_id = _tmdb_id(media)
            if tmdb_id is None:
                continue
            items.append(HistoryItem(tmdb_id=tmdb_id, media_type=media_type, title=media.get("title") or ""))

        logger.debug("Fetched %d watchlist items from Trakt", len(items))
        return items
