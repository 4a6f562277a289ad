"""Trakt command group - account connection."""

import sys

import rich_click as click

from ...api.trakt import TraktApiError
from ..core import AuthenticationError, with_database, with_tmdb, with_trakt
from ..display import console
from ..logic import ImportOrchestrator, SyncStatusTracker
from ..commands.common import error_message, print_hint, success_message


@click.group('trakt')
def trakt_group():
    """Connect or disconnect your Trakt account."""
    pass


@trakt_group.command('login')
@click.option("--code", help="Authorization code (prompted for if omitted)")
@with_tmdb
@with_database
@with_trakt(require_auth=False)
def trakt_login(tmdb, database, trakt, code):
    """Authorize cinelog to read your Trakt history."""
    wizard = ImportOrchestrator(trakt, database, tmdb)

    if wizard.check_connection():
        console.print(success_message("Already connected to Trakt"))
        print_hint("Run 'cinelog trakt logout' first to connect a different account")
        return

    if not trakt.client_secret:
        console.print(error_message(
            "Trakt client secret required - set trakt.client_secret in config.yaml or TRAKT_CLIENT_SECRET"
        ))
        sys.exit(1)

    if not code:
        auth = trakt.get_auth_url()
        console.print("Open this URL in your browser and approve access:\n")
        console.print(f"  [link={auth.url}]{auth.url}[/link]\n")
        code = click.prompt("Authorization code").strip()

    try:
        wizard.submit_auth_code(code)
    except (AuthenticationError, TraktApiError) as e:
        console.print(error_message(str(e)))
        sys.exit(1)

    console.print(success_message("Connected to Trakt"))
    print_hint("Run 'cinelog preview' to see what an import would add")


@trakt_group.command('logout')
@with_tmdb
@with_database
@with_trakt(require_auth=False)
def trakt_logout(tmdb, database, trakt):
    """Forget the stored Trakt tokens."""
    if not trakt.is_authenticated():
        console.print("[dim]Not connected to Trakt[/dim]")
        return

    wizard = ImportOrchestrator(trakt, database, tmdb)
    wizard.logout()
    console.print(success_message("Disconnected from Trakt"))


@trakt_group.command('auto-sync')
@click.argument("state", type=click.Choice(["on", "off"]))
@with_database
def trakt_auto_sync(database, state):
    """Turn automatic syncing on or off."""
    tracker = SyncStatusTracker(database)
    tracker.set_auto_sync(state == "on")
    console.print(success_message(f"Auto sync {'enabled' if state == 'on' else 'disabled'}"))
