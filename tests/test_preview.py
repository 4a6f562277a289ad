"""Tests for import candidates and the import preview."""

from cinelog.cli.logic.candidates import ImportCandidates, fetch_candidates
from cinelog.cli.logic.preview import build_preview
from cinelog.models import HistoryItem, ImportOptions, MediaDetails, MediaType

from fakes import FakeTrakt, episode, movie, series, utc


def test_items_fold_rewatches_into_one_title():
    """Test repeated movie watches and series records become one item each."""
    candidates = ImportCandidates(
        movies=[movie(603, "The Matrix", utc(2024, 1, 5)), movie(603, "The Matrix", utc(2023, 2, 1))],
        series=[
            series(1399, "Game of Thrones", [episode(1, 1, utc(2024, 3, 2))]),
            series(1399, "Game of Thrones", [episode(1, 2, utc(2024, 3, 3))]),
        ],
        ratings={(603, MediaType.MOVIE): 8},
    )

    items = candidates.items()

    assert [i.title for i in items] == ["The Matrix", "Game of Thrones"]
    assert len(items[0].watches) == 2
    assert items[0].trakt_rating == 8
    assert [e.key for e in items[1].episodes] == [(1, 1), (1, 2)]
    assert items[1].trakt_rating is None


def test_watchlist_titles_already_watched_are_skipped():
    """Test a watched title on the watchlist is imported once, as watched."""
    candidates = ImportCandidates(
        movies=[movie(603, "The Matrix", utc(2024, 1, 5))],
        watchlist=[
            HistoryItem(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix"),
            HistoryItem(tmdb_id=66732, media_type=MediaType.SERIES, title="Stranger Things"),
        ],
    )

    items = candidates.items()

    assert [(i.title, i.watchlist) for i in items] == [("The Matrix", False), ("Stranger Things", True)]


def test_fetch_candidates_respects_options():
    """Test only the selected branches are fetched."""
    trakt = FakeTrakt(
        movies=[movie(603, "The Matrix", utc(2024, 1, 5))],
        series=[series(1399, "Game of Thrones", [episode(1, 1, utc(2024, 3, 2))])],
        ratings={(603, MediaType.MOVIE): 9},
    )
    options = ImportOptions(import_watched_movies=True, import_watched_series=False, import_ratings=False)

    candidates = fetch_candidates(trakt, options)

    assert len(candidates.movies) == 1
    assert candidates.series == []
    assert candidates.ratings == {}


def test_build_preview_counts_new_and_existing(library):
    """Test preview splits candidates into new and already in the library."""
    library.create_entry(MediaDetails(tmdb_id=603, media_type=MediaType.MOVIE, title="The Matrix"))
    candidates = ImportCandidates(
        movies=[movie(603, "The Matrix", utc(2024, 1, 5)), movie(550, "Fight Club", utc(2024, 1, 6))],
        series=[series(603, "Same id, different type", [episode(1, 1, utc(2024, 3, 2))])],
    )

    preview = build_preview(candidates.items(), library)

    assert preview.total_items == 3
    assert preview.already_in_library == 1
    assert preview.new_items == 2
    assert preview.movies == ("The Matrix", "Fight Club")
    assert preview.series == ("Same id, different type",)


def test_build_preview_does_not_modify_library(library):
    """Test building a preview writes nothing."""
    candidates = ImportCandidates(movies=[movie(550, "Fight Club", utc(2024, 1, 6))])

    build_preview(candidates.items(), library)

    assert library.count_entries() == 0


def test_build_preview_empty(library):
    """Test an empty history gives an empty preview."""
    preview = build_preview([], library)
    assert (preview.total_items, preview.already_in_library, preview.new_items) == (0, 0, 0)
