"""Tests for the SQLite library repository."""

from datetime import date, datetime, timezone

from cinelog.db import Database
from cinelog.models import (
    EpisodeDetails,
    MediaDetails,
    MediaType,
    PersonalRating,
    SeasonDetails,
    WatchStatus,
)

from fakes import utc


def add_series(library, tmdb_id=1399, episodes=None):
    details = MediaDetails(
        tmdb_id=tmdb_id,
        media_type=MediaType.SERIES,
        title="Game of Thrones",
        number_of_episodes=episodes,
    )
    return library.create_entry(details, source="Trakt Import")


def test_create_entry_is_idempotent(library):
    details = MediaDetails(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix", release_date=date(1999, 3, 31))

    first = library.create_entry(details, source="Trakt Import")
    second = library.create_entry(details, source="Trakt Sync")

    assert first.id == second.id
    assert second.source == "Trakt Import"
    assert library.count_entries() == 1


def test_same_tmdb_id_different_type(library):
    library.create_entry(MediaDetails(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix"))

    assert library.is_movie_in_library(603)
    assert not library.is_series_in_library(603)
    assert library.find_series(603) is None


def test_schema_survives_reopen(tmp_path):
    path = tmp_path / "cinelog.db"
    Database(path).create_entry(MediaDetails(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix"))

    assert Database(path).is_movie_in_library(603)


def test_personal_rating(library):
    entry = library.create_entry(MediaDetails(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix"))

    library.update_personal_rating(entry.id, PersonalRating.DECENT)
    assert library.find_movie(603).personal_rating == PersonalRating.DECENT

    library.update_personal_rating(entry.id, None)
    assert library.find_movie(603).personal_rating is None


def test_movie_watch_one_per_day(library):
    entry = library.create_entry(MediaDetails(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix"))

    assert library.add_movie_watch(entry.id, utc(2024, 1, 5, 10)) is True
    assert library.movie_watch_exists(entry.id, utc(2024, 1, 5, 23))
    assert library.add_movie_watch(entry.id, utc(2024, 1, 5, 23)) is False
    assert library.add_movie_watch(entry.id, utc(2024, 1, 6)) is True

    assert library.get_movie_watches(entry.id) == [utc(2024, 1, 5, 10), utc(2024, 1, 6)]


def test_mark_movie_watched(library):
    entry = library.create_entry(MediaDetails(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix"))
    assert entry.watch_status == WatchStatus.NOT_STARTED

    library.mark_movie_watched(entry.id)

    assert library.find_movie(603).watch_status == WatchStatus.COMPLETED


def test_record_episode_once(library):
    entry = add_series(library)

    assert library.record_episode_watched(entry.id, 1, 1, utc(2024, 3, 2)) is True
    assert library.record_episode_watched(entry.id, 1, 1, utc(2024, 5, 1)) is False
    assert library.record_episode_watched(entry.id, 1, 2) is True

    assert library.get_episode_progress(entry.id) == {(1, 1): utc(2024, 3, 2), (1, 2): None}


def test_episode_air_date_is_read_back_as_midnight_utc(library):
    entry = add_series(library)

    library.record_episode_watched(entry.id, 1, 1, date(2011, 4, 17))

    assert library.get_episode_progress(entry.id)[(1, 1)] == datetime(2011, 4, 17, tzinfo=timezone.utc)


def test_update_series_watch_status(library):
    entry = add_series(library, episodes=2)
    assert library.update_series_watch_status(entry.id) == WatchStatus.NOT_STARTED

    library.record_episode_watched(entry.id, 1, 1, utc(2024, 3, 2))
    assert library.update_series_watch_status(entry.id) == WatchStatus.WATCHING

    library.record_episode_watched(entry.id, 1, 2, utc(2024, 3, 3))
    assert library.update_series_watch_status(entry.id) == WatchStatus.COMPLETED
    assert library.find_series(1399).watch_status == WatchStatus.COMPLETED


def test_update_series_watch_status_falls_back_to_known_episodes(library):
    entry = add_series(library)
    library.save_season_episodes(entry.id, SeasonDetails(1, (
        EpisodeDetails(1, 1, air_date=date(2011, 4, 17)),
        EpisodeDetails(1, 2, air_date=date(2011, 4, 24)),
    )))
    library.record_episode_watched(entry.id, 1, 1)
    library.record_episode_watched(entry.id, 1, 2)

    assert library.update_series_watch_status(entry.id) == WatchStatus.COMPLETED


def test_season_air_dates(library):
    entry = add_series(library)
    library.save_season_episodes(entry.id, SeasonDetails(2, (
        EpisodeDetails(2, 1, name="The North Remembers", air_date=date(2012, 4, 1)),
        EpisodeDetails(2, 2, name="Unaired"),
    )))

    assert library.get_episode_air_dates(entry.id) == {(2, 1): date(2012, 4, 1)}
    assert library.get_known_seasons(entry.id) == [2]


def test_get_last_watch_date(library):
    assert library.get_last_watch_date() is None

    movie = library.create_entry(MediaDetails(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix"))
    series = add_series(library)
    library.add_movie_watch(movie.id, utc(2024, 1, 5))
    library.record_episode_watched(series.id, 1, 1, utc(2024, 3, 2))
    library.record_episode_watched(series.id, 1, 2)

    assert library.get_last_watch_date() == utc(2024, 3, 2)


def test_trakt_settings(library):
    settings = library.get_trakt_settings()
    assert settings["access_token"] is None
    assert settings["last_sync_at"] is None
    assert settings["auto_sync_enabled"] is False

    library.save_trakt_tokens("access", "refresh", utc(2030, 1, 1))
    library.update_last_sync(utc(2024, 6, 1))
    library.set_auto_sync(True)

    settings = library.get_trakt_settings()
    assert settings["access_token"] == "access"
    assert settings["expires_at"] == utc(2030, 1, 1)
    assert settings["last_sync_at"] == utc(2024, 6, 1)
    assert settings["auto_sync_enabled"] is True

    library.clear_trakt_tokens()
    settings = library.get_trakt_settings()
    assert settings["access_token"] is None
    assert settings["last_sync_at"] == utc(2024, 6, 1)
