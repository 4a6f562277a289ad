"""Data models for Trakt history and the local library."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class MediaType(Enum):
    """Type of media item."""
    MOVIE = "movie"
    SERIES = "series"


class PersonalRating(Enum):
    """Local five-tier rating scale, highest first."""
    OUTSTANDING = 5
    ENTERTAINING = 4
    DECENT = 3
    MEH = 2
    WASTE = 1

    def to_int(self) -> int:
        return self.value

    @classmethod
    def from_int(cls, value: int) -> Optional["PersonalRating"]:
        """Return the tier stored as ``value``, or None for anything outside 1-5."""
        for rating in cls:
            if rating.value == value:
                return rating
        return None

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def description(self) -> str:
        return _RATING_DESCRIPTIONS[self]


_RATING_DESCRIPTIONS = {
    PersonalRating.OUTSTANDING: "Outstanding - Absolutely brilliant, stays with you.",
    PersonalRating.ENTERTAINING: "Entertaining - Strong craft, enjoyable, recommendable.",
    PersonalRating.DECENT: "Decent - Watchable, even if not life-changing.",
    PersonalRating.MEH: "Meh - Didn't click, uninspiring.",
    PersonalRating.WASTE: "Waste - Waste of time.",
}


class WatchStatus(Enum):
    """Watch status of a library entry."""
    NOT_STARTED = "not_started"
    WATCHING = "watching"
    COMPLETED = "completed"


class ImportStep(Enum):
    """Step of the import wizard."""
    CONNECT = "connect"
    SELECT_OPTIONS = "select_options"
    PREVIEW = "preview"
    IMPORTING = "importing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class AuthUrl:
    """OAuth authorization URL and its state token."""
    url: str
    state: str


@dataclass(frozen=True)
class HistoryItem:
    """A watched (or watchlisted) movie or series from Trakt.

    ``watched_at`` is None for watchlist entries.
    """
    tmdb_id: int
    media_type: MediaType
    title: str
    watched_at: Optional[datetime] = None
    trakt_rating: Optional[int] = None


@dataclass(frozen=True)
class WatchedEpisode:
    """A single episode watch record."""
    season_number: int
    episode_number: int
    watched_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.season_number, self.episode_number)


@dataclass(frozen=True)
class WatchedSeries:
    """A series with episode-level watch data."""
    tmdb_id: int
    title: str
    last_watched_at: Optional[datetime] = None
    watched_episodes: tuple[WatchedEpisode, ...] = ()
    trakt_rating: Optional[int] = None


@dataclass(frozen=True)
class ImportOptions:
    """Which branches of the import pipeline to run."""
    import_watched_movies: bool = True
    import_watched_series: bool = True
    import_ratings: bool = True
    import_watchlist: bool = False

    def any_selected(self) -> bool:
        return (
            self.import_watched_movies
            or self.import_watched_series
            or self.import_ratings
            or self.import_watchlist
        )


@dataclass(frozen=True)
class ImportPreview:
    """Diff of remote history against the local library."""
    total_items: int = 0
    already_in_library: int = 0
    new_items: int = 0
    movies: tuple[str, ...] = ()
    series: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImportStatus:
    """Snapshot of a running (or finished) import."""
    in_progress: bool = False
    current_item: Optional[str] = None
    completed: int = 0
    total: int = 0
    errors: tuple[str, ...] = ()

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return 100.0 * self.completed / self.total


@dataclass
class SyncResult:
    """Summary of a finished import, sync or resync run."""
    new_movie_watches: int = 0
    new_episode_watches: int = 0
    updated_items: int = 0
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False

    def merge(self, other: "SyncResult"):
        """Add the counts and errors of ``other`` into this result."""
        self.new_movie_watches += other.new_movie_watches
        self.new_episode_watches += other.new_episode_watches
        self.updated_items += other.updated_items
        self.errors.extend(other.errors)


@dataclass(frozen=True)
class SyncStatus:
    """Connection state with Trakt and last completed sync."""
    is_authenticated: bool = False
    last_sync_at: Optional[datetime] = None
    auto_sync_enabled: bool = False


@dataclass(frozen=True)
class LibraryEntry:
    """A movie or series stored in the local library."""
    id: int
    tmdb_id: int
    media_type: MediaType
    title: str
    watch_status: WatchStatus = WatchStatus.NOT_STARTED
    personal_rating: Optional[PersonalRating] = None
    source: Optional[str] = None


@dataclass(frozen=True)
class MediaDetails:
    """Details about a movie or series as returned by TMDB."""
    tmdb_id: int
    media_type: MediaType
    title: str
    release_date: Optional[date] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    number_of_episodes: Optional[int] = None


@dataclass(frozen=True)
class EpisodeDetails:
    """Episode listing entry from a TMDB season."""
    season_number: int
    episode_number: int
    name: Optional[str] = None
    air_date: Optional[date] = None


@dataclass(frozen=True)
class SeasonDetails:
    """Season listing from TMDB."""
    season_number: int
    episodes: tuple[EpisodeDetails, ...] = ()
