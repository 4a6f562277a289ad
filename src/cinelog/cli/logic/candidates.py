"""Gather import candidates from Trakt.

History is fetched fresh for every preview, import and resync. Raw watch
records are folded into one ImportItem per title, in fetch order: watched
movies, then watched series, then watchlist titles not already covered.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ...api.trakt import TraktApi, TraktApiError, TraktAuthError
from ...models import HistoryItem, ImportOptions, MediaType, WatchedEpisode, WatchedSeries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportItem:
    """One title to reconcile against the library.

    Movies carry every watch timestamp seen for them; series carry their
    raw (not yet deduplicated) episode watch records.
    """
    media_type: MediaType
    tmdb_id: int
    title: str
    watches: Tuple[datetime, ...] = ()
    episodes: Tuple[WatchedEpisode, ...] = ()
    trakt_rating: Optional[int] = None
    watchlist: bool = False

    @property
    def key(self) -> Tuple[int, MediaType]:
        return (self.tmdb_id, self.media_type)


@dataclass
class ImportCandidates:
    """Everything fetched from Trakt for one run."""
    movies: List[HistoryItem] = field(default_factory=list)
    series: List[WatchedSeries] = field(default_factory=list)
    watchlist: List[HistoryItem] = field(default_factory=list)
    ratings: Dict[Tuple[int, MediaType], int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def items(self) -> List[ImportItem]:
        """Fold the fetched records into one ImportItem per title."""
        items: Dict[Tuple[int, MediaType], ImportItem] = {}
        watches: Dict[Tuple[int, MediaType], List] = {}

        for movie in self.movies:
            key = (movie.tmdb_id, MediaType.MOVIE)
            if key not in items:
                items[key] = ImportItem(MediaType.MOVIE, movie.tmdb_id, movie.title)
                watches[key] = []
            if movie.watched_at is not None:
                watches[key].append(movie.watched_at)

        for series in self.series:
            key = (series.tmdb_id, MediaType.SERIES)
            if key not in items:
                items[key] = ImportItem(MediaType.SERIES, series.tmdb_id, series.title)
                watches[key] = []
            watches[key].extend(series.watched_episodes)

        for entry in self.watchlist:
            key = (entry.tmdb_id, entry.media_type)
            if key not in items:
                items[key] = ImportItem(entry.media_type, entry.tmdb_id, entry.title, watchlist=True)

        result = []
        for key, item in items.items():
            recorded = tuple(watches.get(key, ()))
            if item.media_type == MediaType.MOVIE:
                item = replace(item, watches=recorded)
            else:
                item = replace(item, episodes=recorded)
            result.append(replace(item, trakt_rating=self.ratings.get(key)))
        return result


def _fetch(candidates: ImportCandidates, label: str, strict: bool, fetch):
    """Run one Trakt fetch, recording non-fatal failures when not strict."""
    try:
        return fetch()
    except TraktAuthError:
        raise
    except TraktApiError as e:
        if strict:
            raise
        logger.error(f"Failed to fetch {label}: {e}")
        candidates.errors.append(f"Failed to fetch {label}: {e}")
        return None


def fetch_candidates(
    trakt: TraktApi,
    options: ImportOptions,
    since: Optional[datetime] = None,
    strict: bool = True,
) -> ImportCandidates:
    """Fetch everything the selected options ask for.

    Args:
        trakt: Authenticated Trakt client
        options: Which branches to fetch
        since: Only fetch watch history on or after this time
        strict: If True, any Trakt error propagates. Otherwise failed
            fetches are recorded in ``errors`` and the rest continues.
            Authentication errors always propagate.

    Returns:
        ImportCandidates
    """
    candidates = ImportCandidates()

    if options.import_watched_movies:
        movies = _fetch(candidates, "watched movies", strict, lambda: trakt.get_watched_movies(since=since))
        candidates.movies = movies or []
        logger.debug(f"Fetched {len(candidates.movies)} movie watches")

    if options.import_watched_series:
        series = _fetch(
            candidates, "watched series", strict,
            lambda: trakt.get_watched_shows_with_episodes(since=since),
        )
        candidates.series = series or []
        logger.debug(f"Fetched {len(candidates.series)} watched series")

    if options.import_watchlist:
        watchlist = _fetch(candidates, "watchlist", strict, trakt.get_watchlist)
        candidates.watchlist = watchlist or []
        logger.debug(f"Fetched {len(candidates.watchlist)} watchlist items")

    if options.import_ratings:
        ratings = _fetch(candidates, "ratings", strict, trakt.get_ratings)
        candidates.ratings = ratings or {}
        logger.debug(f"Fetched {len(candidates.ratings)} ratings")

    return candidates
