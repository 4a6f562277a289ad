"""Trakt connection state and last-sync bookkeeping."""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from ...api.trakt import TraktApi
from ...db import Database
from ...models import SyncStatus

logger = logging.getLogger(__name__)


class SyncStatusTracker:
    """Holds the SyncStatus that outlives individual import runs.

    The status changes when authentication completes or is cleared and
    when a sync run completes. It is persisted in the library database.
    """

    def __init__(self, library: Database, trakt: Optional[TraktApi] = None):
        self.library = library
        self.trakt = trakt
        self._status = self.load()

    def load(self) -> SyncStatus:
        """Read the stored status."""
        settings = self.library.get_trakt_settings()
        if self.trakt is not None:
            authenticated = self.trakt.is_authenticated()
        else:
            authenticated = bool(settings["access_token"])
        return SyncStatus(
            is_authenticated=authenticated,
            last_sync_at=settings["last_sync_at"],
            auto_sync_enabled=settings["auto_sync_enabled"],
        )

    @property
    def status(self) -> SyncStatus:
        return self._status

    def record_authenticated(self):
        self._status = replace(self._status, is_authenticated=True)
        logger.info("Connected to Trakt")

    def record_logged_out(self):
        self._status = replace(self._status, is_authenticated=False)
        logger.info("Disconnected from Trakt")

    def record_sync_completed(self, completed_at: Optional[datetime] = None) -> datetime:
        """Record that a sync run finished, with or without item errors.

        Args:
            completed_at: Completion time (defaults to now, UTC)

        Returns:
            The recorded timestamp
        """
        completed_at = completed_at or datetime.now(timezone.utc)
        self.library.update_last_sync(completed_at)
        self._status = replace(self._status, last_sync_at=completed_at)
        logger.debug(f"Last sync recorded at {completed_at.isoformat()}")
        return completed_at

    def set_auto_sync(self, enabled: bool):
        self.library.set_auto_sync(enabled)
        self._status = replace(self._status, auto_sync_enabled=enabled)
