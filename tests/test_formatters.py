"""Tests for CLI output formatting."""

from cinelog.cli.display.formatters import (
    DEFAULT_MAX_ERRORS,
    format_import_status,
    format_sync_result,
    truncate_errors,
)
from cinelog.cli.display.console import console
from cinelog.models import ImportStatus, SyncResult


def test_truncate_errors_short_list():
    assert truncate_errors(["a", "b"], 10) == ["a", "b"]


def test_truncate_errors_long_list():
    errors = [f"Failed to import Movie {n}" for n in range(15)]

    shown = truncate_errors(errors)

    assert len(shown) == DEFAULT_MAX_ERRORS + 1
    assert shown[:10] == errors[:10]
    assert shown[-1] == "...and 5 more errors"


def test_truncate_errors_zero_limit():
    assert truncate_errors(["a", "b", "c"], 0) == ["...and 3 more errors"]


def test_format_import_status():
    assert format_import_status(ImportStatus(in_progress=True)) == "Fetching history from Trakt…"
    status = ImportStatus(in_progress=True, current_item="The Matrix", completed=3, total=10)
    assert format_import_status(status) == "3/10 - The Matrix"
    assert format_import_status(ImportStatus(completed=10, total=10)) == "10/10"
    failing = ImportStatus(in_progress=True, current_item="The Matrix", completed=3, total=10, errors=("e1", "e2"))
    assert format_import_status(failing) == "3/10 - The Matrix (2 errors)"
    assert format_import_status(ImportStatus(completed=4, total=4, errors=("e1",))) == "4/4 (1 error)"


def test_import_status_percentage():
    assert ImportStatus().percentage == 0.0
    assert ImportStatus(completed=1, total=4).percentage == 25.0


def test_format_sync_result_truncates():
    result = SyncResult(new_movie_watches=2, errors=[f"error {n}" for n in range(4)])

    with console.capture() as capture:
        format_sync_result(result, max_errors=2)
    output = capture.get()

    assert "error 0" in output
    assert "error 1" in output
    assert "error 2" not in output
    assert "...and 2 more errors" in output
