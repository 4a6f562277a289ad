"""SQLite library repository for movies, series and watch history."""

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .models import (
    LibraryEntry,
    MediaDetails,
    MediaType,
    PersonalRating,
    SeasonDetails,
    WatchStatus,
)


class LibraryError(Exception):
    """Library repository error."""
    pass


def _to_text(value: Optional[date]) -> Optional[str]:
    """Serialize a date or datetime for storage."""
    if value is None:
        return None
    return value.isoformat()


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp, treating naive values as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(value[:10])


class Database:
    """SQLite database holding the personal library."""

    def __init__(self, db_path: str):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self):
        """Create database tables if they don't exist."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS library_entries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    tmdb_id INTEGER NOT NULL,
                    media_type TEXT NOT NULL,
                    title TEXT NOT NULL,
                    release_date TEXT,
                    overview TEXT,
                    poster_path TEXT,
                    total_episodes INTEGER,
                    watch_status TEXT NOT NULL DEFAULT 'not_started',
                    personal_rating INTEGER,
                    source TEXT,
                    added_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(tmdb_id, media_type)
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS movie_watch_sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry_id INTEGER NOT NULL REFERENCES library_entries(id),
                    watched_at TEXT NOT NULL,
                    watched_day TEXT NOT NULL,
                    name TEXT,
                    UNIQUE(entry_id, watched_day)
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS episode_progress (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry_id INTEGER NOT NULL REFERENCES library_entries(id),
                    season_number INTEGER NOT NULL,
                    episode_number INTEGER NOT NULL,
                    watched_at TEXT,
                    UNIQUE(entry_id, season_number, episode_number)
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS episodes (
                    entry_id INTEGER NOT NULL REFERENCES library_entries(id),
                    season_number INTEGER NOT NULL,
                    episode_number INTEGER NOT NULL,
                    name TEXT,
                    air_date TEXT,
                    PRIMARY KEY(entry_id, season_number, episode_number)
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trakt_settings (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    access_token TEXT,
                    refresh_token TEXT,
                    expires_at TEXT,
                    last_sync_at TEXT,
                    auto_sync_enabled INTEGER DEFAULT 0
                )
            """)
            cursor.execute("""
                INSERT OR IGNORE INTO trakt_settings (id) VALUES (1)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_library_tmdb_id
                ON library_entries(tmdb_id)
            """)
            conn.commit()

    @contextmanager
    def get_connection(self):
        """Get database connection context manager.

        Raises:
            LibraryError: If any SQLite operation fails
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise LibraryError(f"Failed to open library database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            raise LibraryError(f"Library database error: {e}") from e
        finally:
            conn.close()

    # ------------------------------------------------------------ entries --

    def _row_to_entry(self, row) -> LibraryEntry:
        rating = row["personal_rating"]
        return LibraryEntry(
            id=row["id"],
            tmdb_id=row["tmdb_id"],
            media_type=MediaType(row["media_type"]),
            title=row["title"],
            watch_status=WatchStatus(row["watch_status"]),
            personal_rating=PersonalRating.from_int(rating) if rating is not None else None,
            source=row["source"],
        )

    def _find_entry(self, tmdb_id: int, media_type: MediaType) -> Optional[LibraryEntry]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM library_entries
                WHERE tmdb_id = ? AND media_type = ?
                """,
                (tmdb_id, media_type.value)
            )
            row = cursor.fetchone()
            return self._row_to_entry(row) if row else None

    def find_movie(self, tmdb_id: int) -> Optional[LibraryEntry]:
        """Get the library entry for a movie by TMDB ID."""
        return self._find_entry(tmdb_id, MediaType.MOVIE)

    def find_series(self, tmdb_id: int) -> Optional[LibraryEntry]:
        """Get the library entry for a series by TMDB ID."""
        return self._find_entry(tmdb_id, MediaType.SERIES)

    def is_movie_in_library(self, tmdb_id: int) -> bool:
        return self.find_movie(tmdb_id) is not None

    def is_series_in_library(self, tmdb_id: int) -> bool:
        return self.find_series(tmdb_id) is not None

    def create_entry(self, details: MediaDetails, source: Optional[str] = None) -> LibraryEntry:
        """Add a movie or series to the library.

        Adding an item that is already present returns the existing entry.

        Args:
            details: TMDB details of the item
            source: Where the entry came from (e.g. 'Trakt Import')

        Returns:
            The stored LibraryEntry
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR IGNORE INTO library_entries
                (tmdb_id, media_type, title, release_date, overview, poster_path,
                 total_episodes, source, added_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    details.tmdb_id,
                    details.media_type.value,
                    details.title,
                    _to_text(details.release_date),
                    details.overview,
                    details.poster_path,
                    details.number_of_episodes,
                    source,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()

        entry = self._find_entry(details.tmdb_id, details.media_type)
        if entry is None:
            raise LibraryError(f"Failed to create library entry for {details.title}")
        return entry

    def update_personal_rating(self, entry_id: int, rating: Optional[PersonalRating]):
        """Set or clear the personal rating of an entry."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE library_entries SET personal_rating = ? WHERE id = ?",
                (rating.to_int() if rating else None, entry_id),
            )
            conn.commit()

    def set_watch_status(self, entry_id: int, status: WatchStatus):
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE library_entries SET watch_status = ? WHERE id = ?",
                (status.value, entry_id),
            )
            conn.commit()

    def count_entries(self, media_type: Optional[MediaType] = None) -> int:
        """Count library entries, optionally of a single media type."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            if media_type is None:
                cursor.execute("SELECT COUNT(*) AS count FROM library_entries")
            else:
                cursor.execute(
                    "SELECT COUNT(*) AS count FROM library_entries WHERE media_type = ?",
                    (media_type.value,),
                )
            return cursor.fetchone()["count"]

    # ------------------------------------------------------- movie watches --

    def movie_watch_exists(self, entry_id: int, watched_at: date) -> bool:
        """Check if a watch session exists for the movie on the same day.

        Args:
            entry_id: Library entry ID
            watched_at: Watch timestamp (only the day is compared)

        Returns:
            True if a session already exists for that day
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT COUNT(*) as count
                FROM movie_watch_sessions
                WHERE entry_id = ? AND watched_day = ?
                """,
                (entry_id, watched_at.isoformat()[:10])
            )
            return cursor.fetchone()["count"] > 0

    def add_movie_watch(self, entry_id: int, watched_at: date, name: Optional[str] = None) -> bool:
        """Record a movie watch session.

        Args:
            entry_id: Library entry ID
            watched_at: Watch timestamp
            name: Optional session label

        Returns:
            True if a new session was stored, False if one existed for that day
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR IGNORE INTO movie_watch_sessions
                (entry_id, watched_at, watched_day, name)
                VALUES (?, ?, ?, ?)
                """,
                (entry_id, _to_text(watched_at), watched_at.isoformat()[:10], name),
            )
            conn.commit()
            return cursor.rowcount > 0

    def mark_movie_watched(self, entry_id: int):
        self.set_watch_status(entry_id, WatchStatus.COMPLETED)

    def get_movie_watches(self, entry_id: int) -> List[datetime]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT watched_at FROM movie_watch_sessions
                WHERE entry_id = ?
                ORDER BY watched_day
                """,
                (entry_id,)
            )
            return [_parse_timestamp(row["watched_at"]) for row in cursor.fetchall()]

    # ----------------------------------------------------- episode watches --

    def episode_watch_exists(self, entry_id: int, season_number: int, episode_number: int) -> bool:
        """Check if an episode already has a watch record."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT COUNT(*) as count
                FROM episode_progress
                WHERE entry_id = ? AND season_number = ? AND episode_number = ?
                """,
                (entry_id, season_number, episode_number)
            )
            return cursor.fetchone()["count"] > 0

    def record_episode_watched(
        self,
        entry_id: int,
        season_number: int,
        episode_number: int,
        watched_at: Optional[date] = None,
    ) -> bool:
        """Record an episode as watched.

        An episode holds at most one watch record; recording it again is a
        no-op.

        Args:
            entry_id: Library entry ID of the series
            season_number: Season number
            episode_number: Episode number
            watched_at: When it was watched, if known

        Returns:
            True if a new record was stored
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR IGNORE INTO episode_progress
                (entry_id, season_number, episode_number, watched_at)
                VALUES (?, ?, ?, ?)
                """,
                (entry_id, season_number, episode_number, _to_text(watched_at)),
            )
            conn.commit()
            return cursor.rowcount > 0

    def get_episode_progress(self, entry_id: int) -> Dict[Tuple[int, int], Optional[datetime]]:
        """Get watched episodes of a series.

        Returns:
            Dict mapping (season, episode) to the recorded watch date
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT season_number, episode_number, watched_at
                FROM episode_progress
                WHERE entry_id = ?
                ORDER BY season_number, episode_number
                """,
                (entry_id,)
            )
            return {
                (row["season_number"], row["episode_number"]): _parse_timestamp(row["watched_at"])
                for row in cursor.fetchall()
            }

    def update_series_watch_status(self, entry_id: int) -> WatchStatus:
        """Recompute a series' watch status from its episode progress.

        Returns:
            The new watch status
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM episode_progress WHERE entry_id = ?",
                (entry_id,),
            )
            watched = cursor.fetchone()["count"]
            cursor.execute(
                """
                SELECT COUNT(*) AS count FROM episodes
                WHERE entry_id = ? AND season_number > 0
                """,
                (entry_id,),
            )
            known = cursor.fetchone()["count"]
            cursor.execute(
                "SELECT total_episodes FROM library_entries WHERE id = ?",
                (entry_id,),
            )
            row = cursor.fetchone()
            total = (row["total_episodes"] if row else None) or known

        if watched == 0:
            status = WatchStatus.NOT_STARTED
        elif total and watched >= total:
            status = WatchStatus.COMPLETED
        else:
            status = WatchStatus.WATCHING

        self.set_watch_status(entry_id, status)
        return status

    # ----------------------------------------------------------- air dates --

    def save_season_episodes(self, entry_id: int, season: SeasonDetails):
        """Store the episode listing of a season, including air dates."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.executemany(
                """
                INSERT OR REPLACE INTO episodes
                (entry_id, season_number, episode_number, name, air_date)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (
                        entry_id,
                        episode.season_number,
                        episode.episode_number,
                        episode.name,
                        _to_text(episode.air_date),
                    )
                    for episode in season.episodes
                ],
            )
            conn.commit()

    def get_episode_air_dates(self, entry_id: int) -> Dict[Tuple[int, int], date]:
        """Get known air dates of a series' episodes.

        Returns:
            Dict mapping (season, episode) to air date
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT season_number, episode_number, air_date
                FROM episodes
                WHERE entry_id = ? AND air_date IS NOT NULL
                """,
                (entry_id,)
            )
            return {
                (row["season_number"], row["episode_number"]): _parse_date(row["air_date"])
                for row in cursor.fetchall()
            }

    def get_known_seasons(self, entry_id: int) -> List[int]:
        """Get season numbers that have at least one known air date."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT DISTINCT season_number FROM episodes
                WHERE entry_id = ? AND air_date IS NOT NULL
                ORDER BY season_number
                """,
                (entry_id,)
            )
            return [row["season_number"] for row in cursor.fetchall()]

    def get_last_watch_date(self) -> Optional[datetime]:
        """Get the most recent watch timestamp recorded anywhere in the library."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT watched_at FROM movie_watch_sessions")
            values = [row["watched_at"] for row in cursor.fetchall()]
            cursor.execute(
                "SELECT watched_at FROM episode_progress WHERE watched_at IS NOT NULL"
            )
            values.extend(row["watched_at"] for row in cursor.fetchall())

        timestamps = [_parse_timestamp(value) for value in values if value]
        return max(timestamps) if timestamps else None

    # ------------------------------------------------------ trakt settings --

    def get_trakt_settings(self) -> Dict:
        """Get stored Trakt tokens and sync settings.

        Returns:
            Dict with access_token, refresh_token, expires_at, last_sync_at
            and auto_sync_enabled
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM trakt_settings WHERE id = 1")
            row = cursor.fetchone()
            return {
                "access_token": row["access_token"],
                "refresh_token": row["refresh_token"],
                "expires_at": _parse_timestamp(row["expires_at"]),
                "last_sync_at": _parse_timestamp(row["last_sync_at"]),
                "auto_sync_enabled": bool(row["auto_sync_enabled"]),
            }

    def save_trakt_tokens(self, access_token: str, refresh_token: str, expires_at: datetime):
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE trakt_settings
                SET access_token = ?, refresh_token = ?, expires_at = ?
                WHERE id = 1
                """,
                (access_token, refresh_token, expires_at.isoformat()),
            )
            conn.commit()

    def clear_trakt_tokens(self):
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE trakt_settings
                SET access_token = NULL, refresh_token = NULL, expires_at = NULL
                WHERE id = 1
                """
            )
            conn.commit()

    def update_last_sync(self, synced_at: datetime):
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE trakt_settings SET last_sync_at = ? WHERE id = 1",
                (synced_at.isoformat(),),
            )
            conn.commit()

    def set_auto_sync(self, enabled: bool):
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE trakt_settings SET auto_sync_enabled = ? WHERE id = 1",
                (1 if enabled else 0,),
            )
            conn.commit()
