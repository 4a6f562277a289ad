"""Shared fixtures."""

from datetime import date, timedelta

import pytest

from cinelog.db import Database
from cinelog.models import MediaType

from fakes import FakeTmdb, FakeTrakt, episode, movie, series, utc


@pytest.fixture
def library(tmp_path):
    """Empty library database."""
    return Database(tmp_path / "cinelog.db")


@pytest.fixture
def binge_history():
    """One movie and a series with a six-episode binge day."""
    binge = [episode(1, n, utc(2024, 3, 2, 20, n)) for n in range(1, 7)]
    return FakeTrakt(
        movies=[movie(603, "The Matrix", utc(2024, 1, 5))],
        series=[series(1399, "Game of Thrones", binge + [episode(1, 7, utc(2024, 3, 9))])],
        ratings={(603, MediaType.MOVIE): 9, (1399, MediaType.SERIES): 8},
    )


@pytest.fixture
def binge_tmdb():
    """Weekly air dates for ten episodes of season 1 of series 1399."""
    air_dates = {n: date(2011, 4, 17) + timedelta(weeks=n - 1) for n in range(1, 11)}
    return FakeTmdb(seasons={(1399, 1): air_dates}, episode_counts={1399: 10})
