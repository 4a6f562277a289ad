"""Import command - full import of Trakt history into the library."""

import sys
import time

import rich_click as click
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from ...api.trakt import TraktApiError
from ...models import ImportStep
from ..core import AuthenticationError, trigger_hook, with_config, with_database, with_tmdb, with_trakt
from ..display import _render_options_table, console, format_import_status, format_preview, format_sync_result
from ..logic import ImportOrchestrator
from .common import (
    LOGIN_HINT,
    error_message,
    import_option_flags,
    print_hint,
    resolve_import_options,
    success_message,
    warning_message,
)

POLL_INTERVAL = 0.2


def _follow_progress(wizard: ImportOrchestrator):
    """Show a live progress bar until the import stops. Ctrl+C cancels."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting…", total=None)
        while True:
            try:
                status = wizard.get_status()
                progress.update(
                    task,
                    description=format_import_status(status),
                    total=status.total or None,
                    completed=status.completed,
                )
                if not status.in_progress:
                    break
                time.sleep(POLL_INTERVAL)
            except KeyboardInterrupt:
                if wizard.request_cancellation():
                    console.print("[yellow]Cancelling after the current item…[/yellow]")
    wizard.wait()


@click.command("import")
@import_option_flags
@click.option("-y", "--yes", is_flag=True, help="Skip the confirmation prompt")
@with_config
@with_tmdb
@with_database
@with_trakt(require_auth=True)
def import_history(config, tmdb, database, trakt, movies, series, ratings, watchlist, yes):
    """Import watched movies, series, ratings and watchlist from Trakt."""
    options = resolve_import_options(config, movies, series, ratings, watchlist)
    wizard = ImportOrchestrator(trakt, database, tmdb, options=options)

    trigger_hook('command_start', command='import')

    wizard.check_connection()
    if not wizard.proceed_to_preview():
        console.print(warning_message("Nothing selected - enable at least one import option"))
        trigger_hook('command_end', command='import', success=False)
        sys.exit(1)

    console.print(_render_options_table(wizard.options))

    try:
        with console.status("[cyan]Fetching history from Trakt...[/cyan]", spinner="dots"):
            preview = wizard.load_preview()
    except (AuthenticationError, TraktApiError) as e:
        console.print(error_message(str(e)))
        trigger_hook('sync_error', error=str(e))
        trigger_hook('command_end', command='import', success=False, error=str(e))
        sys.exit(1)

    format_preview(preview, show_titles=False)

    if not wizard.can_start_import:
        console.print("\n" + success_message("Library is up to date - nothing new to import"))
        trigger_hook('command_end', command='import', success=True)
        return

    if not yes and not click.confirm(f"\nImport {preview.new_items} new items?", default=True):
        wizard.back_to_options()
        trigger_hook('command_end', command='import', success=False)
        return

    wizard.start_import()
    _follow_progress(wizard)

    if wizard.step == ImportStep.CONNECT:
        console.print(error_message(f"Import aborted - Trakt authentication failed: {wizard.auth_error}"))
        print_hint(LOGIN_HINT)
        trigger_hook('sync_error', error=wizard.auth_error)
        trigger_hook('command_end', command='import', success=False, error=wizard.auth_error)
        sys.exit(1)

    result = wizard.result
    format_sync_result(
        result,
        title="Import Results",
        max_errors=config.get("import.max_errors_shown", 10),
    )

    trigger_hook(
        'import_complete',
        new_movie_watches=result.new_movie_watches,
        new_episode_watches=result.new_episode_watches,
        updated_items=result.updated_items,
        errors=len(result.errors),
        cancelled=result.cancelled,
    )
    trigger_hook('command_end', command='import', success=not result.errors)


# Export for lazy loading
cli = import_history
