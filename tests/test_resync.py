"""Tests for resync and incremental sync."""

from datetime import date, datetime, timedelta, timezone

import pytest

from cinelog.cli.core.exceptions import AuthenticationError
from cinelog.cli.logic.import_manager import ImportOrchestrator
from cinelog.cli.logic.resync import RESYNC_BUFFER, ResyncManager, effective_since
from cinelog.models import HistoryItem, MediaType, PersonalRating

from fakes import FakeTmdb, FakeTrakt, episode, movie, series, utc


def test_resync_buffer_is_one_hour():
    assert RESYNC_BUFFER == timedelta(hours=1)


def test_effective_since_aware_datetime():
    """Test an offset timestamp is converted to UTC before the buffer."""
    cet = timezone(timedelta(hours=1))
    since = datetime(2024, 3, 2, 12, 0, tzinfo=cet)

    assert effective_since(since) == datetime(2024, 3, 2, 10, 0, tzinfo=timezone.utc)


def test_effective_since_naive_datetime_is_utc():
    assert effective_since(datetime(2024, 3, 2, 12, 0)) == utc(2024, 3, 2, 11)


def test_effective_since_date():
    """Test a plain date starts at midnight UTC."""
    assert effective_since(date(2024, 3, 2)) == utc(2024, 3, 1, 23)


def test_resync_passes_buffered_since_to_trakt(library):
    trakt = FakeTrakt(movies=[movie(603, "The Matrix", utc(2024, 3, 2, 11, 30))])
    manager = ResyncManager(trakt, library, FakeTmdb())

    result = manager.resync_since(utc(2024, 3, 2, 12))

    assert trakt.since_calls == [utc(2024, 3, 2, 11)]
    # Watched inside the one-hour overlap
    assert result.new_movie_watches == 1
    entry = library.find_movie(603)
    assert entry.source == "Trakt Sync"


def test_resync_after_import_adds_nothing(library, binge_history, binge_tmdb):
    """Test replaying an already imported range records nothing new."""
    wizard = ImportOrchestrator(binge_history, library, binge_tmdb)
    wizard.check_connection()
    wizard.proceed_to_preview()
    wizard.load_preview()
    wizard.start_import(background=False)

    result = ResyncManager(binge_history, library, binge_tmdb).resync_since(date(2024, 1, 1))

    assert result.new_movie_watches == 0
    assert result.new_episode_watches == 0
    assert result.updated_items == 0
    assert result.errors == []


def test_resync_adds_new_episodes_to_existing_series(library, binge_tmdb):
    trakt = FakeTrakt(series=[series(1399, "Game of Thrones", [episode(1, 1, utc(2024, 3, 2))])])
    manager = ResyncManager(trakt, library, binge_tmdb)
    manager.resync_since(date(2024, 1, 1))

    trakt.series = [series(1399, "Game of Thrones", [
        episode(1, 1, utc(2024, 3, 2)),
        episode(1, 2, utc(2024, 3, 9)),
    ])]
    result = manager.resync_since(date(2024, 3, 5))

    assert result.new_episode_watches == 1
    got = library.find_series(1399)
    assert set(library.get_episode_progress(got.id)) == {(1, 1), (1, 2)}
    # Season listing fetched once, then served from the library
    assert binge_tmdb.season_requests == [(1399, 1)]


def test_resync_fills_missing_rating_only(library):
    trakt = FakeTrakt(
        movies=[movie(603, "The Matrix", utc(2024, 1, 5)), movie(550, "Fight Club", utc(2024, 1, 6))],
    )
    manager = ResyncManager(trakt, library, FakeTmdb())
    manager.resync_since(date(2024, 1, 1))
    library.update_personal_rating(library.find_movie(550).id, PersonalRating.MEH)

    trakt.ratings = {(603, MediaType.MOVIE): 10, (550, MediaType.MOVIE): 10}
    result = manager.resync_since(date(2024, 1, 1))

    assert result.updated_items == 1
    assert library.find_movie(603).personal_rating == PersonalRating.OUTSTANDING
    assert library.find_movie(550).personal_rating == PersonalRating.MEH


def test_resync_rewatch_on_new_day(library):
    trakt = FakeTrakt(movies=[movie(603, "The Matrix", utc(2024, 1, 5))])
    manager = ResyncManager(trakt, library, FakeTmdb())
    manager.resync_since(date(2024, 1, 1))

    trakt.movies.append(movie(603, "The Matrix", utc(2024, 2, 10)))
    trakt.movies.append(movie(603, "The Matrix", utc(2024, 2, 10, 22)))
    result = manager.resync_since(date(2024, 1, 1))

    assert result.new_movie_watches == 1
    assert len(library.get_movie_watches(library.find_movie(603).id)) == 2


def test_resync_adds_watchlist_titles(library):
    trakt = FakeTrakt(watchlist=[
        HistoryItem(tmdb_id=66732, media_type=MediaType.SERIES, title="Stranger Things"),
    ])
    result = ResyncManager(trakt, library, FakeTmdb()).resync_since(date(2024, 1, 1))

    entry = library.find_series(66732)
    assert entry.source == "Trakt Watchlist"
    assert result.updated_items == 1
    assert library.get_episode_progress(entry.id) == {}


def test_resync_requires_authentication(library):
    manager = ResyncManager(FakeTrakt(authenticated=False), library, FakeTmdb())

    with pytest.raises(AuthenticationError):
        manager.resync_since(date(2024, 1, 1))
    with pytest.raises(AuthenticationError):
        manager.incremental_sync()


def test_resync_rejected_token(library):
    trakt = FakeTrakt()
    trakt.fail_auth = True

    with pytest.raises(AuthenticationError):
        ResyncManager(trakt, library, FakeTmdb()).resync_since(date(2024, 1, 1))
    assert library.get_trakt_settings()["last_sync_at"] is None


def test_resync_records_last_sync(library):
    manager = ResyncManager(FakeTrakt(), library, FakeTmdb())

    manager.resync_since(date(2024, 1, 1))

    assert library.get_trakt_settings()["last_sync_at"] is not None
    assert manager.tracker.status.last_sync_at is not None


def test_incremental_sync_empty_library(library):
    """Test nothing is fetched when the library has no watch history."""
    trakt = FakeTrakt(movies=[movie(603, "The Matrix", utc(2024, 1, 5))])

    result = ResyncManager(trakt, library, FakeTmdb()).incremental_sync()

    assert result.new_movie_watches == 0
    assert trakt.since_calls == []
    assert library.count_entries() == 0


def test_incremental_sync_starts_from_last_watch(library):
    trakt = FakeTrakt(movies=[movie(603, "The Matrix", utc(2024, 1, 5, 20))])
    manager = ResyncManager(trakt, library, FakeTmdb())
    manager.resync_since(date(2024, 1, 1))

    trakt.movies.append(movie(550, "Fight Club", utc(2024, 1, 7)))
    result = manager.incremental_sync()

    assert trakt.since_calls[-1] == utc(2024, 1, 5, 19)
    assert result.new_movie_watches == 1
    assert library.is_movie_in_library(550)
