"""Business logic layer."""

from .episodes import (
    BINGE_THRESHOLD,
    choose_episode_date,
    deduplicate_episodes,
    group_by_watch_day,
    is_binge_day,
    resolve_episode_dates,
)
from .import_manager import ImportOrchestrator
from .preview import build_preview
from .ratings import map_trakt_rating
from .resync import ResyncManager
from .sync_status import SyncStatusTracker

__all__ = [
    "BINGE_THRESHOLD",
    "choose_episode_date",
    "deduplicate_episodes",
    "group_by_watch_day",
    "is_binge_day",
    "resolve_episode_dates",
    "ImportOrchestrator",
    "build_preview",
    "map_trakt_rating",
    "ResyncManager",
    "SyncStatusTracker",
]
