"""Shared console, message styling and import flags for cinelog commands."""

from typing import Optional

import rich_click as click
from rich.console import Console

from ...models import ImportOptions

# Shared console instance for consistent CLI output formatting
console = Console()

COLOR_SUCCESS = "green"
COLOR_ERROR = "red"
COLOR_WARNING = "yellow"
COLOR_INFO = "cyan"

PREFIX_SUCCESS = f"[{COLOR_SUCCESS}]✓[/{COLOR_SUCCESS}]"
PREFIX_ERROR = f"[{COLOR_ERROR}]✗[/{COLOR_ERROR}]"
PREFIX_WARNING = f"[{COLOR_WARNING}]⚠[/{COLOR_WARNING}]"

LOGIN_HINT = "Run 'cinelog trakt login' to connect your account"


def success_message(text: str) -> str:
    return f"{PREFIX_SUCCESS} {text}"


def error_message(text: str) -> str:
    return f"{PREFIX_ERROR} {text}"


def warning_message(text: str) -> str:
    return f"{PREFIX_WARNING} {text}"


def print_hint(text: str) -> None:
    """Print an indented, dimmed follow-up line under a message."""
    console.print(f"  [dim]{text}[/dim]")


def print_trakt_check(authenticated: bool) -> None:
    """
    Report whether a usable Trakt session exists.

    Args:
        authenticated: Result of the client's token check
    """
    console.print(f"[{COLOR_INFO}]Checking Trakt session…[/{COLOR_INFO}]")
    if authenticated:
        console.print(success_message("Trakt session valid") + "\n")
    else:
        console.print(error_message("Not connected to Trakt"))
        print_hint(LOGIN_HINT)


def import_option_flags(f):
    """
    Add --movies/--series/--ratings/--watchlist toggles to a command.

    Each flag defaults to None so the config file decides when it is not given.
    """
    f = click.option("--watchlist/--no-watchlist", default=None, help="Add watchlist titles to the library")(f)
    f = click.option("--ratings/--no-ratings", default=None, help="Import Trakt ratings")(f)
    f = click.option("--series/--no-series", default=None, help="Import watched series")(f)
    f = click.option("--movies/--no-movies", default=None, help="Import watched movies")(f)
    return f


def resolve_import_options(
    config,
    movies: Optional[bool] = None,
    series: Optional[bool] = None,
    ratings: Optional[bool] = None,
    watchlist: Optional[bool] = None,
) -> ImportOptions:
    """
    Combine command line toggles with import.* config defaults.

    Args:
        config: Config object
        movies, series, ratings, watchlist: Flags from the command line (None = use config)

    Returns:
        ImportOptions
    """
    defaults = ImportOptions()

    def pick(flag, key, default):
        if flag is not None:
            return flag
        return bool(config.get(key, default))

    return ImportOptions(
        import_watched_movies=pick(movies, "import.movies", defaults.import_watched_movies),
        import_watched_series=pick(series, "import.series", defaults.import_watched_series),
        import_ratings=pick(ratings, "import.ratings", defaults.import_ratings),
        import_watchlist=pick(watchlist, "import.watchlist", defaults.import_watchlist),
    )


__all__ = [
    "console",
    "COLOR_SUCCESS",
    "COLOR_ERROR",
    "COLOR_WARNING",
    "COLOR_INFO",
    "PREFIX_SUCCESS",
    "PREFIX_ERROR",
    "PREFIX_WARNING",
    "LOGIN_HINT",
    "success_message",
    "error_message",
    "warning_message",
    "print_hint",
    "print_trakt_check",
    "import_option_flags",
    "resolve_import_options",
]
