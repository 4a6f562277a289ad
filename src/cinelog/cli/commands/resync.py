"""Resync command - replay Trakt history from a date."""

import sys

import rich_click as click

from ...api.trakt import TraktApiError
from ..core import AuthenticationError, trigger_hook, with_config, with_database, with_tmdb, with_trakt
from ..display import console, format_sync_result
from ..logic import ResyncManager
from ..logic.resync import effective_since
from .common import error_message


@click.command()
@click.option(
    "--since",
    required=True,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Sync history watched on or after this date (YYYY-MM-DD, UTC)",
)
@with_config
@with_tmdb
@with_database
@with_trakt(require_auth=True)
def resync(config, tmdb, database, trakt, since):
    """Fill gaps in watch history by syncing everything since a date.

    Items already in the library only gain the watches they are missing,
    so overlapping ranges can be resynced safely.
    """
    trigger_hook('command_start', command='resync', since=since.date().isoformat())

    manager = ResyncManager(trakt, database, tmdb)
    console.print(f"[cyan]Resyncing from {effective_since(since):%Y-%m-%d %H:%M} UTC...[/cyan]\n")

    try:
        with console.status("[cyan]Syncing with Trakt...[/cyan]", spinner="dots"):
            result = manager.resync_since(since)
    except (AuthenticationError, TraktApiError) as e:
        console.print(error_message(str(e)))
        trigger_hook('sync_error', error=str(e))
        trigger_hook('command_end', command='resync', success=False, error=str(e))
        sys.exit(1)

    format_sync_result(result, title="Resync Results", max_errors=config.get("import.max_errors_shown", 10))

    trigger_hook(
        'sync_complete',
        new_movie_watches=result.new_movie_watches,
        new_episode_watches=result.new_episode_watches,
        updated_items=result.updated_items,
        errors=len(result.errors),
    )
    trigger_hook('command_end', command='resync', success=not result.errors)


# Export for lazy loading
cli = resync
