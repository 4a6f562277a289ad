"""Resync and incremental sync of Trakt history."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

from ...api.tmdb import TmdbApi
from ...api.trakt import TraktApi, TraktAuthError
from ...db import Database
from ...models import ImportOptions, SyncResult
from ..core.exceptions import AuthenticationError
from .candidates import fetch_candidates
from .reconcile import SOURCE_SYNC, LibraryReconciler
from .sync_status import SyncStatusTracker

logger = logging.getLogger(__name__)

# Overlap subtracted from every resync lower bound
RESYNC_BUFFER = timedelta(hours=1)

RESYNC_OPTIONS = ImportOptions(
    import_watched_movies=True,
    import_watched_series=True,
    import_ratings=True,
    import_watchlist=True,
)


def effective_since(since: Union[date, datetime]) -> datetime:
    """Normalise a resync lower bound to UTC and apply the buffer.

    Naive datetimes and plain dates are taken to be UTC already.
    """
    if not isinstance(since, datetime):
        since = datetime.combine(since, time.min)
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    else:
        since = since.astimezone(timezone.utc)
    return since - RESYNC_BUFFER


class ResyncManager:
    """Replays Trakt history from a date through the import pipeline."""

    def __init__(
        self,
        trakt: TraktApi,
        library: Database,
        tmdb: TmdbApi,
        tracker: Optional[SyncStatusTracker] = None,
        options: ImportOptions = RESYNC_OPTIONS,
    ):
        """Initialize resync manager.

        Args:
            trakt: Trakt API client
            library: Local library database
            tmdb: TMDB API client
            tracker: Status tracker updated when a run completes
            options: Branches to sync (everything by default)
        """
        self.trakt = trakt
        self.library = library
        self.tracker = tracker or SyncStatusTracker(library, trakt)
        self.options = options
        self.reconciler = LibraryReconciler(library, tmdb, source=SOURCE_SYNC)

    def _require_auth(self):
        if not self.trakt.is_authenticated():
            raise AuthenticationError("Not authenticated with Trakt")

    def resync_since(self, since: Union[date, datetime]) -> SyncResult:
        """Sync history watched on or after ``since``.

        Titles already in the library only gain watch records they are
        missing, so overlapping ranges are safe to repeat.

        Args:
            since: Lower bound of the history to sync

        Returns:
            SyncResult for the run

        Raises:
            AuthenticationError: If Trakt is not connected or rejects the token
        """
        self._require_auth()
        start = effective_since(since)
        logger.info(f"Resyncing Trakt history from {start.isoformat()}")

        result = SyncResult()
        try:
            candidates = fetch_candidates(self.trakt, self.options, since=start, strict=False)
        except TraktAuthError as e:
            raise AuthenticationError(str(e)) from e
        result.errors.extend(candidates.errors)

        for item in candidates.items():
            result.merge(self.reconciler.reconcile(item))

        self.tracker.record_sync_completed()
        logger.info(
            f"Resync complete: {result.new_movie_watches} movie watches, "
            f"{result.new_episode_watches} episode watches, "
            f"{result.updated_items} updated, {len(result.errors)} errors"
        )
        return result

    def incremental_sync(self) -> SyncResult:
        """Sync from the most recent watch recorded in the library.

        With no watch history in the library nothing is synced; a full
        import is needed first.
        """
        self._require_auth()
        last_watch = self.library.get_last_watch_date()
        if last_watch is None:
            logger.info("No watch history in library, skipping incremental sync. Run a full import first.")
            return SyncResult()
        return self.resync_since(last_watch)
