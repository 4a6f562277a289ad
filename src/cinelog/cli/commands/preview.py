"""Preview command - what an import would add, without changing anything."""

import sys

import rich_click as click

from ...api.trakt import TraktApiError
from ..core import AuthenticationError, with_config, with_database, with_tmdb, with_trakt
from ..display import console, format_preview
from ..logic import ImportOrchestrator
from .common import LOGIN_HINT, error_message, import_option_flags, print_hint, resolve_import_options, warning_message


@click.command()
@import_option_flags
@click.option("--titles/--no-titles", default=True, help="List the titles found on Trakt")
@with_config
@with_tmdb
@with_database
@with_trakt(require_auth=True)
def preview(config, tmdb, database, trakt, movies, series, ratings, watchlist, titles):
    """Compare Trakt history with the library and show what is new."""
    options = resolve_import_options(config, movies, series, ratings, watchlist)
    wizard = ImportOrchestrator(trakt, database, tmdb, options=options)

    wizard.check_connection()
    if not wizard.proceed_to_preview():
        console.print(warning_message("Nothing selected - enable at least one import option"))
        sys.exit(1)

    try:
        with console.status("[cyan]Fetching history from Trakt...[/cyan]", spinner="dots"):
            result = wizard.load_preview()
    except AuthenticationError as e:
        console.print(error_message(f"Trakt authentication failed: {e}"))
        print_hint(LOGIN_HINT)
        sys.exit(1)
    except TraktApiError as e:
        console.print(error_message(str(e)))
        sys.exit(1)

    format_preview(result, show_titles=titles)


# Export for lazy loading
cli = preview
