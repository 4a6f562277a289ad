"""Status command - Trakt connection, last sync and library counts."""

import rich_click as click

from ...models import MediaType
from ..core import with_database, with_trakt
from ..display import console, _render_status_table
from ..logic import SyncStatusTracker
from .common import LOGIN_HINT, print_hint


@click.command()
@with_database
@with_trakt(require_auth=False)
def status(database, trakt):
    """Show Trakt connection state, last sync time and library size."""
    sync_status = SyncStatusTracker(database, trakt).status

    table = _render_status_table(
        sync_status,
        movies=database.count_entries(MediaType.MOVIE),
        series=database.count_entries(MediaType.SERIES),
    )
    console.print(table)

    if not sync_status.is_authenticated:
        console.print()
        print_hint(LOGIN_HINT)


# Export for lazy loading
cli = status
