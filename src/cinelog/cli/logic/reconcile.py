"""Merge Trakt history into the local library.

The same reconciliation runs for a full import, a resync and an incremental
sync. Each title goes through episode deduplication, watch-date resolution
and rating mapping before anything is written, and every write is preceded
by an existence check so that repeating a run records nothing new.
"""

import logging
from typing import Optional

from ...api.tmdb import TmdbApi, TmdbApiError
from ...db import Database, LibraryError
from ...models import LibraryEntry, MediaType, SyncResult
from .candidates import ImportItem
from .episodes import deduplicate_episodes, resolve_episode_dates
from .ratings import map_optional_rating

logger = logging.getLogger(__name__)

SOURCE_IMPORT = "Trakt Import"
SOURCE_SYNC = "Trakt Sync"
SOURCE_WATCHLIST = "Trakt Watchlist"

WATCH_SESSION_NAME = "Imported from Trakt"

# Expected failures, logged without a traceback
ITEM_ERRORS = (TmdbApiError, LibraryError)


class LibraryReconciler:
    """Applies import items to the library."""

    def __init__(self, library: Database, tmdb: TmdbApi, source: str = SOURCE_IMPORT):
        """Initialize reconciler.

        Args:
            library: Local library database
            tmdb: TMDB client used to look up details of new titles
            source: Source recorded on entries created from watch history
        """
        self.library = library
        self.tmdb = tmdb
        self.source = source

    def reconcile(self, item: ImportItem) -> SyncResult:
        """Reconcile one title, recording a failure instead of raising.

        Args:
            item: Title to reconcile

        Returns:
            SyncResult for this title
        """
        logger.debug(f"Processing: {item.title} ({item.media_type.value})")
        try:
            if item.watchlist:
                return self.add_to_library(item)
            if item.media_type == MediaType.MOVIE:
                return self.import_movie(item)
            return self.import_series(item)
        except ITEM_ERRORS as e:
            logger.error(f"  Failed to import {item.title}: {e}")
            return SyncResult(errors=[f"Failed to import {item.title}: {e}"])
        except Exception as e:
            logger.exception(f"  Unexpected error importing {item.title}")
            return SyncResult(errors=[f"Failed to import {item.title}: {e}"])

    def _create_entry(self, item: ImportItem, source: str) -> LibraryEntry:
        if item.media_type == MediaType.MOVIE:
            details = self.tmdb.get_movie_details(item.tmdb_id)
        else:
            details = self.tmdb.get_series_details(item.tmdb_id)
        entry = self.library.create_entry(details, source=source)
        logger.info(f"  ✓ Added {item.title} to library")
        return entry

    def _apply_rating(self, entry: LibraryEntry, trakt_rating: Optional[int]) -> bool:
        """Fill an empty personal rating. Existing ratings are never replaced."""
        rating = map_optional_rating(trakt_rating)
        if rating is None or entry.personal_rating is not None:
            return False
        self.library.update_personal_rating(entry.id, rating)
        logger.debug(f"  Rated {entry.title}: {rating.label}")
        return True

    def import_movie(self, item: ImportItem) -> SyncResult:
        """Import a watched movie.

        A watch session is added for every watch day not already recorded,
        so a rewatch on a new day becomes a new session.
        """
        result = SyncResult()
        entry = self.library.find_movie(item.tmdb_id)
        created = entry is None
        if created:
            entry = self._create_entry(item, self.source)

        added = 0
        for watched_at in sorted(item.watches):
            if self.library.movie_watch_exists(entry.id, watched_at):
                continue
            if self.library.add_movie_watch(entry.id, watched_at, name=WATCH_SESSION_NAME):
                added += 1
        if added:
            self.library.mark_movie_watched(entry.id)
            logger.info(f"  ✓ Recorded {added} watch session(s) for {item.title}")
        result.new_movie_watches = added

        if self._apply_rating(entry, item.trakt_rating) and not created:
            result.updated_items += 1
        return result

    def _backfill_air_dates(self, entry: LibraryEntry, item: ImportItem):
        """Fetch TMDB seasons with no known air dates.

        A failed season fetch is not fatal: its episodes keep their watch
        timestamps.
        """
        wanted = sorted({episode.season_number for episode in item.episodes})
        known = set(self.library.get_known_seasons(entry.id))

        for season_number in wanted:
            if season_number in known:
                continue
            try:
                season = self.tmdb.get_season_details(item.tmdb_id, season_number)
            except TmdbApiError as e:
                logger.warning(f"  Failed to fetch season {season_number} of {item.title}: {e}")
                continue
            self.library.save_season_episodes(entry.id, season)
            logger.debug(f"  Saved season {season_number} with {len(season.episodes)} episodes")

    def import_series(self, item: ImportItem) -> SyncResult:
        """Import a watched series with episode-level watch data.

        Episodes are deduplicated and their dates resolved with the binge
        heuristic before being recorded. Episodes already recorded are left
        untouched.
        """
        result = SyncResult()
        entry = self.library.find_series(item.tmdb_id)
        created = entry is None
        if created:
            entry = self._create_entry(item, self.source)

        episodes = deduplicate_episodes(item.episodes)
        if episodes:
            self._backfill_air_dates(entry, item)
            air_dates = self.library.get_episode_air_dates(entry.id)

            added = 0
            for episode, watched_on in resolve_episode_dates(episodes, air_dates):
                if self.library.episode_watch_exists(entry.id, episode.season_number, episode.episode_number):
                    continue
                if self.library.record_episode_watched(
                    entry.id, episode.season_number, episode.episode_number, watched_on
                ):
                    added += 1
            if added:
                status = self.library.update_series_watch_status(entry.id)
                logger.info(f"  ✓ Recorded {added} episode(s) for {item.title} ({status.value})")
            result.new_episode_watches = added

        if self._apply_rating(entry, item.trakt_rating) and not created:
            result.updated_items += 1
        return result

    def add_to_library(self, item: ImportItem) -> SyncResult:
        """Add a watchlist title without any watch data."""
        result = SyncResult()
        if item.media_type == MediaType.MOVIE:
            exists = self.library.is_movie_in_library(item.tmdb_id)
        else:
            exists = self.library.is_series_in_library(item.tmdb_id)
        if exists:
            logger.debug(f"  Skipping (already in library): {item.title}")
            return result

        entry = self._create_entry(item, SOURCE_WATCHLIST)
        self._apply_rating(entry, item.trakt_rating)
        result.updated_items += 1
        return result
