"""Sync command - incremental sync from the last recorded watch."""

import sys

import rich_click as click

from ...api.trakt import TraktApiError
from ..core import AuthenticationError, trigger_hook, with_config, with_database, with_tmdb, with_trakt
from ..display import console, format_sync_result
from ..logic import ResyncManager
from .common import error_message, warning_message


@click.command()
@with_config
@with_tmdb
@with_database
@with_trakt(require_auth=True)
def sync(config, tmdb, database, trakt):
    """Pull new Trakt watches since the most recent one in the library."""
    trigger_hook('command_start', command='sync')

    if database.get_last_watch_date() is None:
        console.print(warning_message("No watch history in the library yet - run 'cinelog import' first"))
        trigger_hook('command_end', command='sync', success=True)
        return

    manager = ResyncManager(trakt, database, tmdb)
    try:
        with console.status("[cyan]Syncing with Trakt...[/cyan]", spinner="dots"):
            result = manager.incremental_sync()
    except (AuthenticationError, TraktApiError) as e:
        console.print(error_message(str(e)))
        trigger_hook('sync_error', error=str(e))
        trigger_hook('command_end', command='sync', success=False, error=str(e))
        sys.exit(1)

    format_sync_result(result, max_errors=config.get("import.max_errors_shown", 10))

    trigger_hook(
        'sync_complete',
        new_movie_watches=result.new_movie_watches,
        new_episode_watches=result.new_episode_watches,
        updated_items=result.updated_items,
        errors=len(result.errors),
    )
    trigger_hook('command_end', command='sync', success=not result.errors)


# Export for lazy loading
cli = sync
